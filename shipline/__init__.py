"""shipline: build, scan, publish and deploy an application in one run."""

__version__ = "0.1.0"
