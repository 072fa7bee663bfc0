"""
Plugin discovery and loading.

A plugin is a directory holding a manifest (plugin.json) plus the command and
agent files it declares. Plugins are discovered by scanning plugin directories:

1. ~/.promptpack/plugins/
2. .promptpack/plugins/ (relative to the working directory)
3. Any extra directories from configuration or the caller

The first directory providing a plugin name wins.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from promptpack.config import Settings
from promptpack.exceptions import LoadError, PromptPackError
from promptpack.manifest import PluginManifest
from promptpack.matching.base import AgentJudge
from promptpack.router import Router
from promptpack.store import LoadFailure, TemplateStore
from promptpack.validator import ValidationReport, validate_manifest

logger = logging.getLogger(__name__)


class PluginLoadError(PromptPackError):
    """
    Raised when a plugin fails to load.

    Attributes:
        failures: Per-file LoadFailure records when template parsing failed
    """

    def __init__(self, message: str, failures: tuple[LoadFailure, ...] = ()):
        self.failures = failures
        super().__init__(message)


@dataclass(frozen=True)
class LoadedPlugin:
    """
    A plugin whose templates are loaded and whose manifest was validated.

    Attributes:
        manifest: The plugin manifest
        store: READY template store built from the manifest's entries
        report: Manifest validation result (may contain failures)
        undeclared: Template files on disk that the manifest does not list
    """

    manifest: PluginManifest
    store: TemplateStore
    report: ValidationReport
    undeclared: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def version(self) -> str:
        return self.manifest.version

    @property
    def ok(self) -> bool:
        """True when every manifest entry resolved."""
        return self.report.ok

    @property
    def skipped(self) -> tuple[LoadFailure, ...]:
        """Declared files that could not be read."""
        return self.store.skipped

    def router(self, judge: Optional[AgentJudge] = None) -> Router:
        return Router(self.store, judge=judge)


def _settings_or_default(settings: Optional[Settings]) -> Settings:
    if settings is not None:
        return settings
    from promptpack.config import settings as global_settings

    return global_settings


def scan_template_paths(plugin_dir: Path, settings: Optional[Settings] = None) -> List[str]:
    """
    List Markdown files under the plugin's commands and agents directories.

    Returns:
        Plugin-relative POSIX paths, sorted
    """
    settings = _settings_or_default(settings)
    found: List[str] = []
    for dirname in (settings.commands_dir, settings.agents_dir):
        template_dir = plugin_dir / dirname
        if not template_dir.is_dir():
            continue
        for path in template_dir.rglob("*.md"):
            if path.is_file():
                found.append(path.relative_to(plugin_dir).as_posix())
    return sorted(found)


def load_plugin_dir(
    plugin_dir: Path, settings: Optional[Settings] = None
) -> LoadedPlugin:
    """
    Load one plugin directory: read its manifest, load templates, validate.

    Args:
        plugin_dir: Directory containing the manifest
        settings: Layout settings (defaults to the global settings)

    Returns:
        LoadedPlugin. Validation failures are reported, not raised.

    Raises:
        PluginLoadError: If the manifest is missing or invalid, or any
                         declared template fails to parse
    """
    settings = _settings_or_default(settings)
    plugin_dir = Path(plugin_dir)
    manifest_path = plugin_dir / settings.manifest_filename

    try:
        manifest = PluginManifest.from_file(manifest_path, plugin_dir)
    except (FileNotFoundError, ValueError) as e:
        raise PluginLoadError(f"Cannot read manifest for {plugin_dir}: {e}") from e

    return build_plugin(manifest, settings)


def build_plugin(manifest: PluginManifest, settings: Optional[Settings] = None) -> LoadedPlugin:
    """
    Load the templates a manifest declares and validate the manifest.

    Raises:
        PluginLoadError: If any declared template fails to parse
    """
    settings = _settings_or_default(settings)
    if manifest.plugin_dir is None:
        raise PluginLoadError(f"Manifest {manifest.name} has no plugin directory")

    store = TemplateStore(
        commands_dir=settings.commands_dir,
        agents_dir=settings.agents_dir,
        marker=settings.frontmatter_marker,
        placeholder=settings.placeholder_token,
    )

    try:
        store.load(manifest.paths, root=manifest.plugin_dir)
    except LoadError as e:
        raise PluginLoadError(
            f"Failed to load plugin '{manifest.name}': {e}", e.failures
        ) from e

    report = validate_manifest(manifest.entries, store)
    declared = set(manifest.paths)
    undeclared = tuple(
        path
        for path in scan_template_paths(manifest.plugin_dir, settings)
        if path not in declared
    )

    if report.ok:
        logger.info(
            f"Loaded plugin {manifest.name} v{manifest.version} "
            f"({report.checked} entries)"
        )
    else:
        logger.warning(
            f"Plugin {manifest.name} loaded with {len(report.failures)} "
            f"manifest problem(s)"
        )
    for path in undeclared:
        logger.info(f"Plugin {manifest.name}: template not in manifest: {path}")

    return LoadedPlugin(
        manifest=manifest,
        store=store,
        report=report,
        undeclared=undeclared,
    )


class PluginLoader:
    """
    Discovers and loads prompt plugins from plugin directories.

    Each subdirectory of a plugin directory that contains a manifest file is
    a plugin. Discovery reads manifests only; templates are loaded on demand
    by load_plugin().
    """

    # Default plugin directories to scan
    DEFAULT_PLUGIN_DIRS = [
        Path.home() / ".promptpack" / "plugins",
        Path(".promptpack") / "plugins",
    ]

    def __init__(
        self,
        plugin_dirs: Optional[List[Path]] = None,
        settings: Optional[Settings] = None,
        include_defaults: bool = True,
    ) -> None:
        """
        Initialize the plugin loader.

        Args:
            plugin_dirs: Additional directories to scan for plugins
            settings: Layout settings (defaults to the global settings)
            include_defaults: Whether to scan DEFAULT_PLUGIN_DIRS and the
                              directories configured in settings
        """
        self.settings = _settings_or_default(settings)

        self.plugin_dirs: List[Path] = []
        if include_defaults:
            self.plugin_dirs.extend(self.DEFAULT_PLUGIN_DIRS)
            self.plugin_dirs.extend(self.settings.extra_plugin_dirs)
        if plugin_dirs:
            self.plugin_dirs.extend(Path(d) for d in plugin_dirs)

        # Cache of discovered manifests (name -> manifest)
        self._manifests: Dict[str, PluginManifest] = {}

        # Cache of loaded plugins (name -> plugin)
        self._plugins: Dict[str, LoadedPlugin] = {}

    def discover_plugins(self) -> List[PluginManifest]:
        """
        Discover all plugins in the plugin directories.

        Returns:
            Discovered manifests in discovery order

        Note:
            Results are cached. Call this method again to refresh discovery.
        """
        self._manifests.clear()
        self._plugins.clear()

        for plugin_dir in self.plugin_dirs:
            if not plugin_dir.exists():
                logger.debug(f"Plugin directory does not exist: {plugin_dir}")
                continue

            if not plugin_dir.is_dir():
                logger.warning(f"Plugin path is not a directory: {plugin_dir}")
                continue

            for subdir in sorted(plugin_dir.iterdir()):
                if not subdir.is_dir():
                    continue

                manifest_path = subdir / self.settings.manifest_filename
                if not manifest_path.exists():
                    continue

                try:
                    manifest = PluginManifest.from_file(manifest_path, subdir)
                except ValueError as e:
                    logger.warning(f"Failed to load manifest from {manifest_path}: {e}")
                    continue

                if manifest.name in self._manifests:
                    logger.debug(
                        f"Skipping plugin {manifest.name} at {subdir} "
                        f"(already found at {self._manifests[manifest.name].plugin_dir})"
                    )
                    continue

                self._manifests[manifest.name] = manifest
                logger.debug(
                    f"Discovered plugin: {manifest.name} v{manifest.version} at {subdir}"
                )

        logger.info(f"Discovered {len(self._manifests)} plugin(s)")
        return list(self._manifests.values())

    def load_plugin(self, name: str) -> LoadedPlugin:
        """
        Load a discovered plugin by name.

        Raises:
            PluginLoadError: If the plugin is unknown or fails to load

        Note:
            Results are cached. Calling this method multiple times with the
            same name returns the same instance.
        """
        if name in self._plugins:
            return self._plugins[name]

        if name not in self._manifests:
            raise PluginLoadError(
                f"Plugin '{name}' not found. Call discover_plugins() first."
            )

        plugin = build_plugin(self._manifests[name], self.settings)
        self._plugins[name] = plugin
        return plugin

    def load_all_plugins(self) -> List[LoadedPlugin]:
        """
        Load all discovered plugins.

        Note:
            Plugins that fail to load are logged but not included in results.
        """
        plugins = []
        for name in self._manifests:
            try:
                plugins.append(self.load_plugin(name))
            except PluginLoadError as e:
                logger.error(f"Failed to load plugin {name}: {e}")
                continue
        return plugins

    def get_manifest(self, name: str) -> Optional[PluginManifest]:
        return self._manifests.get(name)

    def list_plugins(self) -> List[str]:
        return list(self._manifests.keys())

    @property
    def plugin_count(self) -> int:
        return len(self._manifests)


class PluginHandle:
    """
    Holds the active LoadedPlugin for one plugin directory and reloads it.

    reload() builds a complete new plugin before swapping it in, so callers
    that already took `handle.plugin` or `handle.router` keep a valid,
    fully-loaded view. A failed reload leaves the current plugin in place.
    """

    def __init__(
        self,
        plugin_dir: Path,
        settings: Optional[Settings] = None,
        judge: Optional[AgentJudge] = None,
    ) -> None:
        self.plugin_dir = Path(plugin_dir)
        self.settings = _settings_or_default(settings)
        self.judge = judge
        self._reload_lock = threading.Lock()
        self._current: tuple[LoadedPlugin, Router] = self._build()
        logger.info(f"Activated plugin {self.plugin.name} v{self.plugin.version}")

    def _build(self) -> tuple[LoadedPlugin, Router]:
        plugin = load_plugin_dir(self.plugin_dir, self.settings)
        return plugin, plugin.router(self.judge)

    @property
    def plugin(self) -> LoadedPlugin:
        return self._current[0]

    @property
    def router(self) -> Router:
        return self._current[1]

    def reload(self) -> LoadedPlugin:
        """
        Rebuild the plugin from disk and swap it in.

        Raises:
            PluginLoadError: If the new plugin fails to load (the previous
                             plugin stays active)
        """
        with self._reload_lock:
            current = self._build()
            # Single assignment: readers see either the old pair or the new one
            self._current = current
            plugin = current[0]
            logger.info(f"Activated plugin {plugin.name} v{plugin.version}")
            return plugin
