from setuptools import setup, find_packages

setup(
    name="uniform_registry",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"uniform_registry": ["docs/openapi/*.yaml"]},
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn>=0.29.0",
        "pydantic>=2.6.0",
        "pydantic-settings>=2.2.0",
        "python-dotenv>=1.0.0",
        "python-multipart>=0.0.9",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "httpx>=0.27.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "uniform-registry = uniform_registry.api:main",
        ],
    },
)
