from setuptools import setup, find_packages

setup(
    name="marine-suitability",
    version="0.1.0",
    description="Marine aquaculture suitability scoring from temperature and depth grids",
    author="Marine Spatial Planning Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "pandas>=2.0",
        "rasterio>=1.3",
        "affine>=2.4,<3",
        "shapely>=2.0",
        "pydantic>=2.0,<3",
        "pyyaml>=6.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
)
