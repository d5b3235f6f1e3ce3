from setuptools import setup, find_packages

setup(
    name="qfock",
    version="0.1.0",
    description="Symmetry-resolved binary bases and sparse operator matrices for exact diagonalization",
    author="Jeremiah Rowland",
    packages=find_packages(),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
        "openfermion>=1.5.0",
        "scipy>=1.7.0",
    ],
    extras_require={
        "dev": ["pytest>=7.0.0", "pytest-cov>=3.0.0"],
    },
)
