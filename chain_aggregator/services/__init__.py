"""Service modules"""
from .network import NetworkService, build_services

__all__ = ["NetworkService", "build_services"]
