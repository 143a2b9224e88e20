from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="reliasim",
    version="0.1.0",
    description="Curve-driven stochastic failure simulation for tick-based hosts.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"reliasim.schemas": ["*.json"]},
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pyyaml",
        "jsonschema",
    ],
    extras_require={"test": ["pytest"]},
    tests_require=["pytest"],
    entry_points={"console_scripts": ["reliasim=reliasim.cli:main"]},
)
