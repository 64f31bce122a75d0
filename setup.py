# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="cntxtify",
    version="0.1.0",
    description="Assemble a project's structure and source files into a single LLM context",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["cntxtify*"]),
    install_requires=[
        "tiktoken",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "cntxtify=cntxtify.main:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
