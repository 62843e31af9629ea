from setuptools import setup, find_packages

setup(
    name="pki-setup",
    version="0.1.0",
    description="Azure resource setup for the build PKI sample certificate authority",
    author="BuildPki Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "azure-core>=1.29.0",
        "azure-identity>=1.12.0",
        "azure-mgmt-resource>=21.0.0,<24.0.0",
        "azure-mgmt-storage>=21.0.0,<24.0.0",
        "azure-mgmt-web>=7.0.0",
        "azure-mgmt-keyvault>=10.0.0,<12.0.0",
        "prefect>=3.0.0",
        "PyJWT>=2.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pki-setup=pki_setup.cli:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
