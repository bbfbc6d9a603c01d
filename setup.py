from setuptools import setup, find_packages
from pathlib import Path

# Read version from __init__.py
init_path = Path(__file__).parent / "ytx" / "__init__.py"
with open(init_path) as f:
    for line in f:
        if line.startswith("__version__"):
            version = line.split("=")[1].strip().strip('"\'')
            break

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    with open(readme_path, encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="ytx",
    version=version,
    description="Download and transcribe audio from YouTube (or any yt-dlp URL)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    keywords=["download", "transcription", "subtitles", "youtube", "whisper"],
    packages=find_packages(include=["ytx", "ytx.*"]),
    # Core dependencies
    install_requires=[
        "yt-dlp>=2025.4.30",

        # CLI interface and formatting
        "typer>=0.15.3",
        "click>=8.1.8",
        "rich>=14.0.0",
        "colorama>=0.4.6",
        "wcwidth>=0.2.13",

        # Utilities
        "python-json-logger>=2.0.4",

        # Speech recognition
        "faster-whisper>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
        ],
    },

    entry_points={
        "console_scripts": [
            "ytx=ytx.cli:main",
        ],
    },

    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio :: Speech",
        "Topic :: Internet :: WWW/HTTP :: Downloaders",
    ],

    python_requires=">=3.9",
)
