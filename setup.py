from setuptools import setup, find_packages

setup(
    name="patch_engine",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "textual",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "patchengine=patch_engine.cli:main",
        ],
    },
    description="Line diffs, reviewable unified-diff hunks and undoable file edits.",
)
