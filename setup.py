from setuptools import setup, find_packages

setup(
    name="citygml-wkt",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click",
        "geopandas",
        "pandas",
        "shapely",
        "lxml",
        "pyproj",
        "pyyaml",
        "requests",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "citygml2wkt=cli.run_citygml:run_citygml",
        ],
    },
    python_requires=">=3.8",
)
