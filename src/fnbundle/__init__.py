"""Public package entrypoint for batch bundling and deterministic packaging."""

from .archive import zip_files
from .bundle import BatchBundler
from .compiler import CompileOutput, Compiler, EsbuildCompiler
from .config import BuildConfiguration, ExternalPackage
from .errors import (
    ArchiveError,
    BundleError,
    CompilerError,
    ConfigurationError,
    ProcessStartError,
    SpawnError,
)
from .manifest import ArtifactManifest
from .models import (
    ArchiveFile,
    DependenciesResult,
    DependencyInfo,
    FileBuildResult,
    FunctionBuildResult,
    FunctionEntry,
)
from .observability import StructuredLogger
from .pack import pack_functions
from .packagers import Packager, get_packager

__all__ = [
    "ArchiveError",
    "ArchiveFile",
    "ArtifactManifest",
    "BatchBundler",
    "BuildConfiguration",
    "BundleError",
    "CompileOutput",
    "Compiler",
    "CompilerError",
    "ConfigurationError",
    "DependenciesResult",
    "DependencyInfo",
    "EsbuildCompiler",
    "ExternalPackage",
    "FileBuildResult",
    "FunctionBuildResult",
    "FunctionEntry",
    "Packager",
    "ProcessStartError",
    "SpawnError",
    "StructuredLogger",
    "get_packager",
    "pack_functions",
    "zip_files",
]
