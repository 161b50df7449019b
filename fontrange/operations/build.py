"""
Build operations.

Each operation runs one build with a fresh pipeline, using one of the
rewriting strategies:

  build_stylesheets - copy a source tree and rewrite its stylesheets inline
  collect_aliases   - produce an alias table for a bundler
  optimize_assets   - overwrite font files of an emitted dist/ in place
"""

import asyncio
import shutil
import tempfile
from pathlib import Path

from fontrange.config.options import PluginOptions
from fontrange.config.paths import NODE_MODULES
from fontrange.core.font_io import iter_files
from fontrange.core.host import Alias, Asset, FileSystemHost
from fontrange.pipeline.report import ReportLine
from fontrange.pipeline.rewriter import AliasRewriter, AssetRewriter, InlineRewriter
from fontrange.pipeline.runner import FontSubsetPipeline
from fontrange.utils.logging import logger


def _with_cache_under(options: PluginOptions, base: Path) -> PluginOptions:
    """Resolve a relative cache directory against base."""
    if options.cache_dir.is_absolute():
        return options
    return options.with_overrides(cache_dir=base / options.cache_dir)


def find_stylesheets(directory: Path, options: PluginOptions) -> list[Path]:
    """Stylesheets under a directory selected by the options."""
    return [p for p in iter_files(directory, options.include) if options.matches(p)]


def build_stylesheets(
    src_dir: Path, out_dir: Path, options: PluginOptions
) -> list[ReportLine]:
    """
    Copy src_dir to out_dir and rewrite stylesheets to reference subsets.

    Args:
        src_dir: Source tree
        out_dir: Output tree (created or updated)
        options: Pipeline options; a relative cache_dir is placed under out_dir

    Returns:
        Report lines of the optimized fonts
    """
    src_dir = src_dir.resolve()
    out_dir = out_dir.resolve()
    options = _with_cache_under(options, out_dir)

    stylesheets = find_stylesheets(src_dir, options)
    if not stylesheets:
        logger.warning(f"No stylesheets found in {src_dir}/")
        return []

    logger.info(f"Copying {src_dir}/ to {out_dir}/")
    shutil.copytree(
        src_dir,
        out_dir,
        dirs_exist_ok=True,
        ignore=shutil.ignore_patterns(NODE_MODULES),
    )

    host = FileSystemHost(src_dir, out_dir=out_dir)
    pipeline = FontSubsetPipeline(options, host, InlineRewriter(host))

    logger.info(f"Analyzing {len(stylesheets)} stylesheets")
    results = asyncio.run(pipeline.run(stylesheets))

    for path, code in results.items():
        target = host.output_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(code, encoding="utf-8")

    logger.info(f"Wrote {len(results)} stylesheets to {out_dir}/")
    return pipeline.report.drain()


def collect_aliases(
    src_dir: Path, options: PluginOptions
) -> tuple[list[Alias], list[ReportLine]]:
    """
    Subset fonts of a source tree and build the alias table for them.

    Args:
        src_dir: Source tree
        options: Pipeline options; a relative cache_dir is placed under src_dir

    Returns:
        Alias entries (original URL -> subset file) and report lines
    """
    src_dir = src_dir.resolve()
    options = _with_cache_under(options, src_dir)

    host = FileSystemHost(src_dir)
    pipeline = FontSubsetPipeline(options, host, AliasRewriter(host.aliases))

    stylesheets = find_stylesheets(src_dir, options)
    logger.info(f"Analyzing {len(stylesheets)} stylesheets")
    asyncio.run(pipeline.run(stylesheets))

    logger.info(f"Collected {len(host.aliases)} aliases")
    return host.aliases, pipeline.report.drain()


def load_bundle(dist_dir: Path, options: PluginOptions) -> dict[str, Asset]:
    """Load emitted font files of a dist directory, keyed by relative path."""
    bundle = {}
    for path in iter_files(dist_dir, options.font_extensions):
        file_name = path.relative_to(dist_dir).as_posix()
        bundle[file_name] = Asset(file_name, path.read_bytes())
    return bundle


def optimize_assets(dist_dir: Path, options: PluginOptions) -> list[ReportLine]:
    """
    Overwrite font files of an emitted build with their subsets.

    Font file names are kept, so no stylesheet needs rewriting.

    Args:
        dist_dir: Emitted build output
        options: Pipeline options (cache_dir is not used)

    Returns:
        Report lines of the optimized fonts
    """
    dist_dir = dist_dir.resolve()
    bundle = load_bundle(dist_dir, options)
    if not bundle:
        logger.warning(f"No font assets found in {dist_dir}/")
        return []

    stylesheets = find_stylesheets(dist_dir, options)
    logger.info(f"Analyzing {len(stylesheets)} stylesheets, {len(bundle)} font assets")

    with tempfile.TemporaryDirectory() as tmp:
        host = FileSystemHost(dist_dir)
        rewriter = AssetRewriter(bundle)
        pipeline = FontSubsetPipeline(
            options.with_overrides(cache_dir=Path(tmp)), host, rewriter
        )
        asyncio.run(pipeline.run(stylesheets))

    for file_name in sorted(rewriter.replaced):
        (dist_dir / file_name).write_bytes(bundle[file_name].source)
        logger.info(f"Replaced {file_name}")

    return pipeline.report.drain()
