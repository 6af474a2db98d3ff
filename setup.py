# setup.py
from setuptools import setup, find_packages


def parse_reqs(fname="requirements.txt"):
    with open(fname) as f:
        # strip comments and empty lines
        return [l.strip() for l in f if l.strip() and not l.startswith("#")]


setup(
    name="vegindx",
    version="1.0.0",
    package_dir={"vegindx": "vegindx"},
    packages=find_packages(include=["vegindx", "vegindx.*"]),
    install_requires=parse_reqs(),
    extras_require={"test": ["pytest"]},
    include_package_data=True,
    package_data={"vegindx": ["resources/*.json"]},
    python_requires=">=3.10",
    entry_points={"console_scripts": ["vegindx=vegindx.core.cli:cli"]},
)
