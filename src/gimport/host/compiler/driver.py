"""
Compile driver.

Compiles the loaded modules of a project with the project JDK's javac on a
background thread and reports completion through a callback:

    rebuild()/make()
        └── compile thread
                ├── order modules (dependencies first)
                ├── per module: skip if up to date (make only), javac, copy resources, stamp
                └── callback(aborted, errors, warnings, context)

Output layout mirrors an IDE project:
    <project>/out/production/<module>/   # main-like source sets
    <project>/out/test/<module>/         # test source sets

The callback fires exactly once per run, before the progress indicator
stops.
"""

import logging
import shutil
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from gimport.config import COMPILER_OUTPUT_DIR, ImportConfig
from gimport.host.compiler.context import CompileContext, CompileScope
from gimport.host.compiler.javac import JavacRunner
from gimport.host.interfaces import CompileStatusNotification, ICompilerService
from gimport.host.model import CompilerMessage, MessageCategory, ModuleData
from gimport.host.storage import read_json_safe, write_json_atomic
from gimport.interrupt_utils import handle_keyboard_interrupt_properly

if TYPE_CHECKING:
    from gimport.host.jdk import JdkTable
    from gimport.host.modules import ModuleManager
    from gimport.host.project import Project

STAMP_FILE = ".gimport-stamp"


def order_modules(names: list[str], by_name: dict[str, ModuleData]) -> list[ModuleData]:
    """Order modules so dependencies come first.

    Modules outside ``names`` are not compiled but are still traversed so
    that ordering through them is respected. Cycles are broken silently.
    """
    wanted = set(names)
    ordered: list[ModuleData] = []
    visited: set[str] = set()
    visiting: set[str] = set()

    def _visit(name: str) -> None:
        if name in visited or name in visiting:
            return
        module = by_name.get(name)
        if module is None:
            return
        visiting.add(name)
        for dep in module.dependencies:
            _visit(dep)
        visiting.discard(name)
        visited.add(name)
        if name in wanted:
            ordered.append(module)

    for name in sorted(wanted):
        _visit(name)
    return ordered


def dependency_closure(module: ModuleData, by_name: dict[str, ModuleData]) -> list[ModuleData]:
    """All modules ``module`` depends on, directly or transitively."""
    result: list[ModuleData] = []
    seen = {module.name}
    stack = list(reversed(module.dependencies))
    while stack:
        name = stack.pop()
        if name in seen:
            continue
        seen.add(name)
        dep = by_name.get(name)
        if dep is None:
            continue
        result.append(dep)
        stack.extend(reversed(dep.dependencies))
    return result


def collect_files(dirs: list[str], pattern: str) -> list[Path]:
    files: list[Path] = []
    for d in dirs:
        root = Path(d)
        if root.is_dir():
            files.extend(p for p in root.rglob(pattern) if p.is_file())
    return sorted(files)


class CompileDriver(ICompilerService):
    """Runs rebuild and make for a project."""

    def __init__(self, config: ImportConfig, jdk_table: "JdkTable", modules: "ModuleManager"):
        """Initialize the driver.

        Args:
            config: Run configuration
            jdk_table: Table used to resolve the project SDK by name
            modules: Module registry (decides which modules are loaded)
        """
        self.config = config
        self.jdk_table = jdk_table
        self.modules = modules

    def set_build_process_heap_size(self, project: "Project", size_mb: int) -> None:
        project.state.build_process_heap_mb = size_mb

    def project_scope(self, project: "Project") -> CompileScope:
        return CompileScope(project=project, module_names=[m.name for m in self.modules.loaded_modules(project)])

    def rebuild(self, project: "Project", callback: CompileStatusNotification) -> CompileContext:
        return self._start(project, self.project_scope(project), callback, is_rebuild=True)

    def make(self, project: "Project", scope: CompileScope, callback: CompileStatusNotification) -> CompileContext:
        return self._start(project, scope, callback, is_rebuild=False)

    @staticmethod
    def output_dir(project: "Project", module: ModuleData) -> Path:
        kind = "test" if module.is_test else "production"
        return Path(project.base_path) / COMPILER_OUTPUT_DIR / kind / module.name

    def _start(
        self,
        project: "Project",
        scope: CompileScope,
        callback: CompileStatusNotification,
        is_rebuild: bool,
    ) -> CompileContext:
        context = CompileContext(project, scope, is_rebuild)
        context.progress_indicator.start()
        thread = threading.Thread(
            target=self._run,
            args=(context, callback),
            name="compile-driver",
            daemon=True,
        )
        thread.start()
        logging.info(f"{'Rebuild' if is_rebuild else 'Make'} started for {len(scope.module_names)} module(s)")
        return context

    def _run(self, context: CompileContext, callback: CompileStatusNotification) -> None:
        aborted = True
        try:
            aborted = not self._compile(context)
        except KeyboardInterrupt as ke:
            handle_keyboard_interrupt_properly(ke)
        except Exception as e:
            logging.exception("Compilation crashed")
            context.add_message(
                CompilerMessage(MessageCategory.ERROR, f"Internal compiler error: {type(e).__name__}: {e}")
            )
        finally:
            errors = context.get_message_count(MessageCategory.ERROR)
            warnings = context.get_message_count(MessageCategory.WARNING)
            try:
                callback(aborted, errors, warnings, context)
            except Exception as e:
                logging.error(f"Compile status callback raised: {e}")
            finally:
                context.progress_indicator.stop()

    def _compile(self, context: CompileContext) -> bool:
        """Compile every module in scope.

        Returns:
            False if the run was cancelled, True otherwise
        """
        project = context.project
        indicator = context.progress_indicator

        sdk = project.sdk or self.jdk_table.find_jdk(project.state.sdk_name)
        if sdk is None:
            context.add_message(
                CompilerMessage(MessageCategory.ERROR, f"Cannot start compiler: the SDK is not specified for {project.name}")
            )
            return True

        out_root = Path(project.base_path) / COMPILER_OUTPUT_DIR
        if context.is_rebuild and out_root.exists():
            shutil.rmtree(out_root)

        by_name = {m.name: m for m in project.state.modules}
        ordered = order_modules(context.scope.module_names, by_name)
        runner = JavacRunner(sdk, heap_mb=project.state.build_process_heap_mb)
        argfiles = project.state_dir / "javac"

        recompiled: set[str] = set()
        skipped = 0
        total = len(ordered)
        for index, module in enumerate(ordered, 1):
            if indicator.is_canceled:
                logging.warning("Compilation cancelled")
                return False
            indicator.text = f"[{index}/{total}] {module.name}"

            sources = collect_files(module.source_dirs, "*.java")
            resources = collect_files(module.resource_dirs, "*")
            if not sources and not resources:
                continue

            output = self.output_dir(project, module)
            classpath = [self.output_dir(project, dep).as_posix() for dep in dependency_closure(module, by_name)]
            classpath += module.external_classpath
            fingerprint = {"inputs": [p.as_posix() for p in sources + resources], "classpath": classpath}
            deps_changed = any(dep in recompiled for dep in module.dependencies)
            if not context.is_rebuild and not deps_changed and self._is_up_to_date(output, fingerprint):
                skipped += 1
                logging.debug(f"{module.name} is up to date")
                continue

            # removes classes of deleted sources
            if output.exists():
                shutil.rmtree(output)

            if sources:
                logging.info(f"{indicator.text} compiling {len(sources)} source file(s)")
                returncode, messages = runner.compile(sources, output, classpath, argfiles / f"{module.name}.args")
                for message in messages:
                    context.add_message(message)
                if returncode != 0:
                    recompiled.add(module.name)
                    continue

            self._copy_resources(module, output)
            write_json_atomic(output / STAMP_FILE, fingerprint)
            recompiled.add(module.name)

        context.add_message(
            CompilerMessage(
                MessageCategory.STATISTICS,
                f"Modules compiled: {len(recompiled)}, up to date: {skipped}, in scope: {total}",
            )
        )
        return True

    @staticmethod
    def _is_up_to_date(output: Path, fingerprint: dict) -> bool:
        """Whether ``output`` was built from exactly these inputs and classpath, none newer than the stamp."""
        stamp = output / STAMP_FILE
        if read_json_safe(stamp) != fingerprint:
            return False
        stamp_time = stamp.stat().st_mtime
        return all(Path(p).stat().st_mtime <= stamp_time for p in fingerprint["inputs"])

    @staticmethod
    def _copy_resources(module: ModuleData, output: Path) -> None:
        for d in module.resource_dirs:
            root = Path(d)
            if root.is_dir():
                shutil.copytree(root, output, dirs_exist_ok=True)
