"""SBOM generation through an external tool."""

from csascan.sbom.generator import SbomGenerator

__all__ = ["SbomGenerator"]
