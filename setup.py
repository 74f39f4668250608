# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Setup script for webhook_reporter."""

from setuptools import find_packages, setup

setup(
    name="webhook-reporter",
    version="1.0.0",
    description="Error reporting pipeline that deduplicates application errors and posts them to a webhook",
    author="Copilot-for-Consensus contributors",
    license="MIT",
    packages=find_packages(include=["webhook_reporter", "webhook_reporter.*"]),
    python_requires=">=3.11",
    install_requires=[
        "requests>=2.32.4",
        "pydantic>=2.4.0",
        "pika>=1.3.0",
        "redis>=5.0.0",
        "prometheus-client>=0.19.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "webhook-reporter=webhook_reporter.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
