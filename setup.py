# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="assetbundler",
    version="1.0.0",
    description="Asset registry serving, minifying and rendering JavaScript and CSS groups per scope",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["assetbundler*"]),
    python_requires=">=3.9",
    install_requires=[
        "rjsmin",
        "rcssmin",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'assetbundler=assetbundler.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
