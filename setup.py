from setuptools import setup, find_packages

setup(
    name="RDFAnalysis",
    version="0.1.0",
    packages=find_packages(include=["rdfanalysis", "rdfanalysis.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "matplotlib",
        "scipy",
        "scikit-learn",
        "joblib",
    ],
    extras_require={
        "progress": ["tqdm"],
        "test": ["pytest"],
    },
    python_requires=">=3.9",
    description="Researcher degrees of freedom analysis: exhaust and power-test multi-step analysis pipelines",
)
