"""Setup file for the OpenAPI Directory package."""

from setuptools import setup, find_packages

setup(
    name="openapi-directory",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click",
        "faiss-cpu",
        "httpx",
        "numpy",
        "pinecone",
        "prometheus-client",
        "pydantic>=2",
        "python-dotenv",
        "pyyaml",
        "rich",
        "sentence-transformers",
        "tiktoken",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "openapi-directory=openapi_directory.__main__:main",
        ],
    },
    author="Pimentel",
    author_email="pimentel@example.com",
    description="Semantic retrieval of OpenAPI operations for natural-language objectives",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    url="https://github.com/pimentel/openapi-directory",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.9",
)
