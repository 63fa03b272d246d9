from setuptools import setup, find_packages

setup(
    name="ipautils",
    version="0.1.0",
    packages=find_packages(include=["ipautils", "ipautils.*"]),
    include_package_data=True,
    package_data={"ipautils": ["templates/*.plist"]},
    python_requires=">=3.9",
    install_requires=[
        "rich",
        "rich-argparse",
        "python-dotenv",
        "toml",
        "asn1crypto",
        "cryptography>=39",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "ipautils=ipautils.cli:main",
        ],
    },
)
