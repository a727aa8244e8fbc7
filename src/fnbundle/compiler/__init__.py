"""Compiler contract and the esbuild command line adapter."""

from .base import CompileOutput, Compiler
from .esbuild import EsbuildCompiler, esbuild_flags

__all__ = ["CompileOutput", "Compiler", "EsbuildCompiler", "esbuild_flags"]
