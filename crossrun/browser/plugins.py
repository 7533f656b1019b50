"""Plugin registry for the browser test server.

A plugin contributes one or more factories keyed ``"<kind>:<name>"``,
where kind is ``preprocessor``, ``reporter`` or ``launcher``. Every
factory takes the server config and returns the plugin object.

The server config's ``plugins`` list holds plugin names (looked up in
PLUGINS) or inline ``{"<kind>:<name>": factory}`` mappings.
"""

from typing import Any, Callable, Iterable, Mapping, Union

from ..bundler import bundle_factory, save_adapter_factory
from ..errors import ConfigurationError
from ..reporting import BridgeReporter
from .launchers import SeleniumLauncher

Factory = Callable[[dict[str, Any]], Any]


def _launcher(
    name: str, driver_class: str, options_class: str, headless_arg: str = None
) -> Factory:
    def factory(config: dict[str, Any]) -> SeleniumLauncher:
        args = config.get("browserArgs", {}).get(name, ())
        return SeleniumLauncher(name, driver_class, options_class, headless_arg, args)
    return factory


def bridge_reporter_factory(config: dict[str, Any]) -> BridgeReporter:
    return BridgeReporter(log_level=config.get("client", {}).get("logLevel"))


PLUGINS: dict[str, dict[str, Factory]] = {
    "bundler": {
        "preprocessor:bundle": bundle_factory,
    },
    "save-adapter": {
        "preprocessor:save-adapter": save_adapter_factory,
    },
    "bridge-reporter": {
        "reporter:bridge": bridge_reporter_factory,
    },
    "chrome-launcher": {
        "launcher:Chrome": _launcher("Chrome", "Chrome", "ChromeOptions"),
        "launcher:ChromeHeadless": _launcher(
            "ChromeHeadless", "Chrome", "ChromeOptions", "--headless"
        ),
    },
    "firefox-launcher": {
        "launcher:Firefox": _launcher("Firefox", "Firefox", "FirefoxOptions"),
        "launcher:FirefoxHeadless": _launcher(
            "FirefoxHeadless", "Firefox", "FirefoxOptions", "-headless"
        ),
    },
    "edge-launcher": {
        "launcher:Edge": _launcher("Edge", "Edge", "EdgeOptions"),
    },
    "ie-launcher": {
        "launcher:IE": _launcher("IE", "Ie", "IeOptions"),
    },
    "safari-launcher": {
        "launcher:Safari": _launcher("Safari", "Safari", "SafariOptions"),
    },
}

# Browser name -> plugin providing its launcher
BROWSER_LAUNCHERS = {
    "Chrome": "chrome-launcher",
    "ChromeHeadless": "chrome-launcher",
    "Firefox": "firefox-launcher",
    "FirefoxHeadless": "firefox-launcher",
    "Edge": "edge-launcher",
    "IE": "ie-launcher",
    "Safari": "safari-launcher",
}


class PluginRegistry:
    """Factories collected from the configured plugins."""

    def __init__(self, plugins: Iterable[Union[str, Mapping[str, Factory]]]):
        self._factories: dict[tuple[str, str], Factory] = {}
        for plugin in plugins:
            if isinstance(plugin, str):
                if plugin not in PLUGINS:
                    raise ConfigurationError(f"Unknown plugin: {plugin}")
                entries = PLUGINS[plugin]
            else:
                entries = plugin
            for key, factory in entries.items():
                kind, _, name = key.partition(":")
                self._factories[(kind, name)] = factory

    def has(self, kind: str, name: str) -> bool:
        return (kind, name) in self._factories

    def create(self, kind: str, name: str, config: dict[str, Any]) -> Any:
        """Instantiate a plugin.

        Raises:
            ConfigurationError: If no loaded plugin provides it.
        """
        try:
            factory = self._factories[(kind, name)]
        except KeyError:
            raise ConfigurationError(
                f"No {kind} named '{name}' is registered. Check the 'plugins' setting."
            ) from None
        return factory(config)
