"""Install and enable plugins declared in the source."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from demokit.domain.ports import RemoteServiceError

from .context import PhaseResult
from .errors import PluginInstallError
from .records import PluginRecord, RecordType
from .source import iter_custom_records

if TYPE_CHECKING:
    from demokit.domain.ports import PluginService, ReleaseLookup

    from .context import PipelineContext
    from .records import PluginPayload

log = getLogger(__name__)

BUNDLE_PATTERN = "*.tar.gz"


def locate_plugin_bundle(plugin: PluginPayload, *, base_dir: Path) -> Path:
    """Return the prebuilt bundle for a local plugin.

    ``path`` may point at the bundle itself or at the plugin directory, in which
    case ``dist/*.tar.gz`` is searched. Relative paths resolve against ``base_dir``.
    """

    if plugin.path is None:
        raise PluginInstallError(f"plugin {plugin.display_name} has no path")
    root = Path(plugin.path).expanduser()
    if not root.is_absolute():
        root = base_dir / root
    if root.is_file():
        return root

    candidates = sorted((root / "dist").glob(BUNDLE_PATTERN))
    if not candidates:
        raise PluginInstallError(
            f"no plugin bundle found in {root / 'dist'} for {plugin.display_name}"
        )
    matching = [path for path in candidates if plugin.plugin_id in path.name]
    return max(matching or candidates, key=lambda path: path.stat().st_mtime)


@dataclass(slots=True)
class PluginPhase:
    """Install plugins from GitHub releases or local bundles, then enable them.

    Installed state is taken from the server's plugin listing. Any failure aborts
    the phase.
    """

    plugins: PluginService
    releases: ReleaseLookup | None = None
    force_local: bool = False
    force_all: bool = False
    name: str = "plugins"

    def run(self, context: PipelineContext) -> PhaseResult:
        result = PhaseResult(phase=self.name)
        records = [
            record.plugin
            for record in iter_custom_records(context.source_path, RecordType.PLUGIN, PluginRecord)
        ]
        if not records:
            log.info("No plugins to install")
            return result

        try:
            installed = {plugin.id for plugin in self.plugins.list_installed_plugins()}
        except RemoteServiceError as exc:
            raise PluginInstallError(f"failed to list installed plugins: {exc}") from exc

        # GitHub plugins first, local bundles after, each group in source order.
        ordered = sorted(records, key=lambda plugin: plugin.source != "github")
        base_dir = context.source_path.parent
        for plugin in ordered:
            force = self._should_force(plugin)
            if plugin.plugin_id in installed and not force:
                log.info("Plugin %s already installed", plugin.display_name)
                result.skipped += 1
                continue
            self._install(plugin, force=force, base_dir=base_dir)
            installed.add(plugin.plugin_id)
            result.processed += 1

        log.info(
            "Plugins finished: installed=%d, skipped=%d", result.processed, result.skipped
        )
        return result

    def _should_force(self, plugin: PluginPayload) -> bool:
        if plugin.force_install or self.force_all:
            return True
        return plugin.source == "local" and self.force_local

    def _install(self, plugin: PluginPayload, *, force: bool, base_dir: Path) -> None:
        try:
            if plugin.source == "github":
                if self.releases is None or plugin.github_repo is None:
                    raise PluginInstallError(
                        f"plugin {plugin.display_name} needs a GitHub release lookup"
                    )
                release = self.releases.latest_plugin_release(plugin.github_repo, plugin.plugin_id)
                log.info(
                    "Installing %s %s from %s",
                    plugin.display_name,
                    release.tag,
                    release.asset_name,
                )
                self.plugins.install_plugin_from_url(release.download_url, force=force)
            else:
                bundle = locate_plugin_bundle(plugin, base_dir=base_dir)
                log.info("Uploading %s from %s", plugin.display_name, bundle)
                self.plugins.upload_plugin(bundle, force=force)
        except RemoteServiceError as exc:
            if force or not exc.indicates_existing:
                raise PluginInstallError(
                    f"failed to install plugin {plugin.display_name}: {exc}"
                ) from exc
            log.info("Plugin %s already present on server", plugin.display_name)

        try:
            self.plugins.enable_plugin(plugin.plugin_id)
        except RemoteServiceError as exc:
            raise PluginInstallError(
                f"failed to enable plugin {plugin.display_name}: {exc}"
            ) from exc
