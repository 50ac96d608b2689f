from setuptools import setup, find_packages

setup(
    name="eduadapt",
    version="0.1.0",
    packages=find_packages(exclude=["eduadapt.tests", "eduadapt.tests.*"]),
    install_requires=[
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "PyYAML>=6.0",
        "rapidfuzz>=3.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    python_requires=">=3.8",
)
