#!/usr/bin/env python3
"""Check that the correlation stack is installed and usable."""

import sys
from importlib import import_module

REQUIRED_PACKAGES = [
    ('cv2', 'opencv-contrib-python'),
    ('numpy', 'numpy'),
    ('yaml', 'PyYAML'),
    ('loguru', 'loguru'),
    ('jsonschema', 'jsonschema'),
]

# OpenCV entry points the image operations rely on
REQUIRED_CV2_FUNCTIONS = [
    'integral',
    'copyMakeBorder',
    'sepFilter2D',
    'GaussianBlur',
    'Laplacian',
    'cvtColor',
]


def check_packages():
    """Return the index names of packages that fail to import."""
    missing = []
    for module_name, package_name in REQUIRED_PACKAGES:
        try:
            mod = import_module(module_name)
            version = getattr(mod, '__version__', 'unknown')
            print(f"[OK] {package_name:25} {version}")
        except ImportError:
            missing.append(package_name)
            print(f"[MISSING] {package_name:25} NOT FOUND")
    return missing


def check_cv2_functions():
    """Return the OpenCV functions absent from the installed build."""
    cv2 = import_module('cv2')
    absent = [name for name in REQUIRED_CV2_FUNCTIONS if not hasattr(cv2, name)]
    for name in absent:
        print(f"[MISSING] cv2.{name}")
    return absent


def check_default_config():
    """Load the bundled default configuration."""
    from configs.settings import load_config

    try:
        config = load_config()
    except Exception as e:
        print(f"[ERROR] default.yaml failed to load: {e}")
        return False
    print(f"[OK] default.yaml ({config.correlation.mode} correlator)")
    return True


def check_dependencies():
    """Check packages, OpenCV functions and the default configuration."""
    print("Checking dependencies...\n")
    missing = check_packages()

    print("\n" + "="*60)

    if missing:
        print(f"\n[ERROR] Missing {len(missing)} package(s):")
        for pkg in missing:
            print(f"   - {pkg}")
        print("\nInstall with:")
        print(f"   pip install {' '.join(missing)}")
        return False

    if check_cv2_functions():
        print("\n[ERROR] Installed OpenCV build lacks required functions")
        return False

    if not check_default_config():
        return False

    print(f"\n[SUCCESS] All {len(REQUIRED_PACKAGES)} required packages are installed!")
    return True


if __name__ == "__main__":
    success = check_dependencies()
    sys.exit(0 if success else 1)
