"""System utilities for OpenCV setup and dependency checking."""

from __future__ import annotations

import importlib.metadata
import logging
import platform
import sys
import threading
from typing import Any

import cv2
import psutil

logger = logging.getLogger(__name__)

_OPENCV_INITIALIZED = False
_INIT_LOCK = threading.Lock()


class SystemUtils:
    """Utilities for process-wide setup and system information."""

    @staticmethod
    def initialize_opencv(*, use_optimized: bool = True) -> bool:
        """Prepare OpenCV once per process.

        Returns True when this call performed the initialization and False
        when it had already been done.
        """
        global _OPENCV_INITIALIZED

        with _INIT_LOCK:
            if _OPENCV_INITIALIZED:
                return False

            try:
                cv2.setUseOptimized(use_optimized)
            except cv2.error as e:
                msg = f"Unable to load OpenCV: {e}"
                logger.exception(msg)
                raise RuntimeError(msg) from e

            _OPENCV_INITIALIZED = True

        msg = (
            f"OpenCV {cv2.__version__} loaded successfully "
            f"(optimized={cv2.useOptimized()})"
        )
        logger.info(msg)
        return True

    @staticmethod
    def is_opencv_initialized() -> bool:
        return _OPENCV_INITIALIZED

    @staticmethod
    def reset_opencv_initialization() -> None:
        """Forget the one-time initialization (test helper)."""
        global _OPENCV_INITIALIZED

        with _INIT_LOCK:
            _OPENCV_INITIALIZED = False

    @staticmethod
    def get_opencv_info() -> dict[str, Any]:
        """Describe the loaded OpenCV build."""
        return {
            "version": cv2.__version__,
            "optimized": cv2.useOptimized(),
            "threads": cv2.getNumThreads(),
            "cascade_dir": getattr(getattr(cv2, "data", None), "haarcascades", None),
        }

    @staticmethod
    def get_system_info() -> dict[str, Any]:
        """Get basic platform and resource information."""
        try:
            memory = psutil.virtual_memory()
            cpu_count = psutil.cpu_count()
        except (OSError, RuntimeError) as e:
            msg = f"Error reading system resources: {e}"
            logger.warning(msg)
            memory = None
            cpu_count = None

        return {
            "platform": {
                "system": platform.system(),
                "release": platform.release(),
                "machine": platform.machine(),
            },
            "python": {
                "version": sys.version,
                "executable": sys.executable,
                "implementation": platform.python_implementation(),
            },
            "resources": {
                "cpu_cores": cpu_count,
                "memory": {
                    "total": memory.total,
                    "available": memory.available,
                    "percent": memory.percent,
                }
                if memory is not None
                else {"status": "unavailable"},
            },
            "opencv": SystemUtils.get_opencv_info(),
        }

    @staticmethod
    def check_dependencies() -> dict[str, dict[str, Any]]:
        """Check availability and versions of required Python packages."""
        python_deps = {
            "opencv-python": "cv2",
            "numpy": "numpy",
            "pydantic": "pydantic",
            "psutil": "psutil",
        }

        return {
            dist_name: SystemUtils._check_python_package(dist_name, module_name)
            for dist_name, module_name in python_deps.items()
        }

    @staticmethod
    def _check_python_package(package_name: str, module_name: str) -> dict[str, Any]:
        """Check if a Python package is importable and get its version."""
        try:
            __import__(module_name)
        except ImportError:
            return {
                "available": False,
                "version": None,
                "error": f"Package {package_name} not installed",
            }

        try:
            version = importlib.metadata.version(package_name)
        except importlib.metadata.PackageNotFoundError:
            version = "unknown"

        return {
            "available": True,
            "version": version,
        }
