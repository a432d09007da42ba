from setuptools import setup, find_packages
from pathlib import Path

this_dir = Path(__file__).parent

readme = (this_dir / "README.md").read_text(encoding="utf-8")

setup(
    name="ovrsvm",
    version="0.1.0",
    description="One-vs-Rest SVM classification for tabular data",
    long_description=readme,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "scikit-learn",
        "tqdm",
    ],
    extras_require={
        "plots": ["matplotlib", "seaborn"],
        "test": ["pytest"],
    },
)
