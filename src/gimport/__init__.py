"""
gimport - headless Gradle project import and build.

Opens a Gradle project without a UI, attaches a JDK, imports the Gradle
project model, saves the resulting project state and compiles it.
"""

__version__ = "0.1.0"
