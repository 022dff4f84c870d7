"""Platform scraper registry.

Each platform module decorates its scraper with :func:`register_scraper`;
modules in this package are imported on first use of the package so the
sync service only ever looks scrapers up by platform name.
"""
import os
import importlib
import pkgutil
import logging

logger = logging.getLogger(__name__)

_registry = {}

_NON_PLATFORM_MODULES = frozenset({'base', 'common', 'fetcher'})


def register_scraper(cls):
    """Decorator to register a platform scraper."""
    existing = _registry.get(cls.PLATFORM_NAME)
    if existing is not None and existing is not cls:
        raise ValueError(
            f"Platform {cls.PLATFORM_NAME} already registered by {existing.__name__}"
        )
    _registry[cls.PLATFORM_NAME] = cls
    logger.debug(f"Registered scraper: {cls.PLATFORM_NAME} ({cls.PLATFORM_DISPLAY})")
    return cls


def get_scraper_class(platform_name: str):
    return _registry.get(platform_name)


def get_all_scrapers():
    return dict(_registry)


def supported_platforms() -> list[str]:
    return sorted(_registry)


def get_scraper_instance(platform_name: str, context, fetcher=None):
    cls = _registry.get(platform_name)
    if cls is None:
        raise ValueError(f"Unknown platform: {platform_name}")
    return cls(context, fetcher=fetcher)


def _auto_discover():
    package_dir = os.path.dirname(__file__)
    for _, module_name, _ in pkgutil.iter_modules([package_dir]):
        if module_name in _NON_PLATFORM_MODULES:
            continue
        try:
            importlib.import_module(f'.{module_name}', package=__package__)
        except Exception as e:
            logger.error(f"Failed to load scraper module {module_name}: {e}")


_auto_discover()
