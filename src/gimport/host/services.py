"""Wiring of the local host services."""

import logging
from dataclasses import dataclass

from gimport.config import ImportConfig
from gimport.host.application import Application
from gimport.host.compiler.driver import CompileDriver
from gimport.host.gradle.integration import GradleIntegration
from gimport.host.jdk import JdkTable
from gimport.host.modules import ModuleManager, ProjectDataManager
from gimport.host.project import ProjectManager
from gimport.host.vfs import LocalFileSystem


@dataclass
class HostServices:
    """Every collaborator the import command talks to.

    Attributes:
        vfs: Path lookup
        application: Locks, document saving, settings, exit
        projects: Project open/save/dispose
        jdk_table: Process-wide JDK table
        gradle: Gradle linking and refresh
        importer: Imports refreshed project graphs
        modules: Module listing and unloading
        compiler: rebuild / make
    """

    vfs: LocalFileSystem
    application: Application
    projects: ProjectManager
    jdk_table: JdkTable
    gradle: GradleIntegration
    importer: ProjectDataManager
    modules: ModuleManager
    compiler: CompileDriver


def create_host_services(config: ImportConfig) -> HostServices:
    """Build the local host services and load persisted application settings.

    Args:
        config: Run configuration

    Returns:
        HostServices ready for one import run
    """
    jdk_table = JdkTable()
    application = Application(config, jdk_table)
    application.load_settings()
    modules = ModuleManager()

    services = HostServices(
        vfs=LocalFileSystem(),
        application=application,
        projects=ProjectManager(application),
        jdk_table=jdk_table,
        gradle=GradleIntegration(config, jdk_table),
        importer=ProjectDataManager(application.documents),
        modules=modules,
        compiler=CompileDriver(config, jdk_table, modules),
    )
    logging.debug(f"Host services ready (settings in {config.config_dir})")
    return services
