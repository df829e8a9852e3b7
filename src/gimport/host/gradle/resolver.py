"""Conversion of Gradle model records into a project graph.

Every Gradle project becomes a holder module (no sources) plus one module
per source set. With qualified names, modules are named after the Gradle
path: ``root``, ``root.core``, ``root.core.main``; builds nested under the
root (``buildSrc``) are prefixed with their relative location, e.g.
``root.buildSrc.main``. Without qualified names the plain Gradle project
name is used and source sets are joined with an underscore.
"""

from pathlib import Path
from typing import Any

from gimport.host.model import ModuleData, ProjectData

MAIN_SOURCE_SET = "main"


def _build_prefix(record: dict[str, Any], root: Path, root_name: str) -> str:
    build_root = Path(record["rootDir"]).resolve()
    if build_root == root:
        return root_name
    try:
        relative = build_root.relative_to(root)
    except ValueError:
        return record.get("rootName") or build_root.name
    return ".".join([root_name, *relative.parts])


def _holder_name(record: dict[str, Any], root: Path, root_name: str, qualified: bool) -> str:
    if not qualified:
        return record["name"]
    prefix = _build_prefix(record, root, root_name)
    path = record["path"].strip(":").replace(":", ".")
    return f"{prefix}.{path}" if path else prefix


def _source_set_name(holder: str, source_set: str, qualified: bool) -> str:
    return f"{holder}.{source_set}" if qualified else f"{holder}_{source_set}"


def build_project_data(
    root_dir: Path,
    records: list[dict[str, Any]],
    qualified: bool = True,
) -> ProjectData | None:
    """Turn Gradle model records into a ProjectData graph.

    Args:
        root_dir: Root of the linked Gradle build
        records: Records from ``GradleRunner.dump_model``
        qualified: Use qualified module names

    Returns:
        ProjectData, or None if Gradle reported no projects
    """
    if not records:
        return None

    root = root_dir.resolve()
    main_build = [r for r in records if Path(r["rootDir"]).resolve() == root]
    root_name = main_build[0]["rootName"] if main_build else root.name

    # (build root, gradle path) -> {source set: module name}
    source_set_modules: dict[tuple[str, str], dict[str, str]] = {}
    seen: set[tuple[str, str]] = set()
    modules: list[ModuleData] = []
    pending: list[tuple[dict[str, Any], str, ModuleData]] = []

    for record in records:
        build_key = Path(record["rootDir"]).resolve().as_posix()
        key = (build_key, record["path"])
        if key in seen:
            continue
        seen.add(key)

        holder = _holder_name(record, root, root_name, qualified)
        modules.append(ModuleData(name=holder, gradle_path=record["path"], directory=record["dir"]))

        names: dict[str, str] = {}
        for source_set, info in sorted(record.get("sourceSets", {}).items()):
            module = ModuleData(
                name=_source_set_name(holder, source_set, qualified),
                gradle_path=record["path"],
                directory=record["dir"],
                source_set=source_set,
                source_dirs=list(info.get("sourceDirs", [])),
                resource_dirs=list(info.get("resourceDirs", [])),
                external_classpath=list(info.get("classpath", [])),
            )
            names[source_set] = module.name
            modules.append(module)
            pending.append((info, build_key, module))
        source_set_modules[key] = names

    for info, build_key, module in pending:
        deps: list[str] = []
        own = source_set_modules[(build_key, module.gradle_path)]
        if module.source_set != MAIN_SOURCE_SET and MAIN_SOURCE_SET in own:
            deps.append(own[MAIN_SOURCE_SET])
        for gradle_path in info.get("projectDeps", []):
            target = source_set_modules.get((build_key, gradle_path), {}).get(MAIN_SOURCE_SET)
            if target and target != module.name and target not in deps:
                deps.append(target)
        module.dependencies = deps

    return ProjectData(name=root_name, root_dir=root.as_posix(), modules=modules)
