# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="ucss-build",
    version="1.0.0",
    description="Build pipeline for modular CSS: import bundling, namespace prefixing, minification and compression",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["ucss_build*"]),
    python_requires=">=3.9",
    install_requires=[
        "brotli",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'ucss-build=ucss_build.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
