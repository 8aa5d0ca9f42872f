from setuptools import setup, find_packages

setup(
    name="hipster",
    version="0.3.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "hipster": ["templates/*.j2"],
    },
    entry_points={
        'console_scripts': [
            'hipster=hipster.cli:main',
        ],
    },
    install_requires=[
        "jinja2>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    python_requires=">=3.9",
    author="Hipster",
    description="Source to GCN assembly line mapping for HIP kernels",
)
