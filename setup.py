"""
Setup script for hybridrag: hybrid semantic/lexical text retrieval engine
"""

from setuptools import setup, find_packages

setup(
    name="hybridrag",
    version="1.0.0",
    description="Hybrid semantic/lexical retrieval engine with graceful tokenizer and embedding fallbacks",
    long_description="In-process retrieval engine combining transformer embeddings, exact cosine search and lexical re-ranking",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src", exclude=["tests*", "docs*", "examples*"]),
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "pydantic>=2.11.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=1.0.0",

        # Data processing
        "numpy>=1.24.0",

        # Tokenization
        "regex>=2022.0.0",
        "tokenizers>=0.15.0",
    ],
    extras_require={
        "onnx": [
            "onnxruntime>=1.16.0"
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-mock>=3.10.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "mypy>=1.0.0",
            "flake8>=4.0.0",
        ],
        "all": [
            "onnxruntime>=1.16.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "hybridrag=hybridrag.__main__:main",
        ],
    },
    author="HybridRAG Team",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="rag retrieval embeddings wordpiece hybrid-search",
)
