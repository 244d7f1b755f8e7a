"""
Installation stages and the pipeline that runs them.

Each stage raises gameinstaller.errors.InstallError subclasses; the
pipeline turns the first one into a terminal progress event.
"""

from __future__ import annotations

from gameinstaller.install.assets import AssetSynchronizer
from gameinstaller.install.java import JavaRuntime, JavaRuntimeProvisioner, component_for
from gameinstaller.install.libraries import InstalledLibraries, LibraryInstaller, maven_path
from gameinstaller.install.pipeline import InstallOutcome, InstallPipeline
from gameinstaller.install.resolver import ManifestResolver, merge_manifests
from gameinstaller.install.worker import InstallWorker

__all__ = [
    "AssetSynchronizer",
    "InstallOutcome",
    "InstallPipeline",
    "InstallWorker",
    "InstalledLibraries",
    "JavaRuntime",
    "JavaRuntimeProvisioner",
    "LibraryInstaller",
    "ManifestResolver",
    "component_for",
    "maven_path",
    "merge_manifests",
]
