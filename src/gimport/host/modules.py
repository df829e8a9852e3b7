"""Module registry and project-data import."""

import json
import logging
from typing import TYPE_CHECKING, Iterable

from gimport.host.interfaces import IModuleRegistry, IProjectDataImporter
from gimport.host.model import ModuleData, ProjectData

if TYPE_CHECKING:
    from gimport.host.application import FileDocumentManager
    from gimport.host.project import Project


class ModuleManager(IModuleRegistry):
    """Lists a project's modules and tracks which are unloaded."""

    def sorted_modules(self, project: "Project") -> list[ModuleData]:
        return sorted(project.state.modules, key=lambda m: m.name)

    def loaded_modules(self, project: "Project") -> list[ModuleData]:
        unloaded = set(project.state.unloaded_modules)
        return [m for m in self.sorted_modules(project) if m.name not in unloaded]

    def set_unloaded_modules(self, project: "Project", names: Iterable[str]) -> None:
        project.state.unloaded_modules = sorted(set(names))
        logging.debug(f"Unloaded modules for {project.name}: {project.state.unloaded_modules}")

    def unloaded_modules(self, project: "Project") -> list[str]:
        return list(project.state.unloaded_modules)


class ProjectDataManager(IProjectDataImporter):
    """Imports a refreshed project graph into the project model.

    Each imported module also gets a descriptor document under
    ``<project>/.gimport/modules/``; the descriptors are buffered and only
    reach disk when documents are saved.
    """

    def __init__(self, documents: "FileDocumentManager"):
        self.documents = documents

    def import_data(self, data: ProjectData, project: "Project", overwrite: bool = True) -> None:
        if overwrite:
            modules = list(data.modules)
        else:
            by_name = {m.name: m for m in project.state.modules}
            by_name.update({m.name: m for m in data.modules})
            modules = list(by_name.values())

        names = {m.name for m in modules}
        project.state.name = data.name
        project.state.modules = modules
        project.state.unloaded_modules = [n for n in project.state.unloaded_modules if n in names]

        modules_dir = project.state_dir / "modules"
        for module in data.modules:
            self.documents.set_text(
                modules_dir / f"{module.name}.json",
                json.dumps(module.to_dict(), indent=2) + "\n",
            )

        logging.info(f"Imported {len(data.modules)} module(s) into {project.name}")
