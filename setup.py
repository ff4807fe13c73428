from setuptools import setup, find_packages

setup(
    name="blogimport",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "aiohttp>=3.13.3",
        "aiofiles>=23.2.1",
        "beautifulsoup4>=4.12.0",
        "lxml>=4.9.0",
        "markdownify>=0.11.6",
        "tqdm>=4.66.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "blogimport=blogimport.cli:main",
        ],
    },
    python_requires=">=3.9",
)
