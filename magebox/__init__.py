"""Local development helpers for Magento and MageOS: certificates, Xdebug, composer.json and self-update."""

__version__ = "0.1.0"