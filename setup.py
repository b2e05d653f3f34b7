from setuptools import setup, find_packages
from pathlib import Path

here = Path(__file__).parent
long_description = (here / "README.md").read_text(encoding="utf-8")

setup(
    name="compliance-inspector",
    version="0.1.0",
    description="Rule-based compliance scanner for repositories and infrastructure-as-code",
    long_description=long_description,
    long_description_content_type="text/markdown",

    packages=find_packages(exclude=["tests*", "examples*", "docs*"]),
    package_data={
        "compliance_inspector": [
            "config/*.yaml",
            "rules/rule_configs/*.yaml",
            "reports/templates/*.j2",
        ]
    },
    include_package_data=True,
    python_requires=">=3.10",

    install_requires=[
        "pyyaml>=6.0",
        "jsonschema>=4.0.0",
        "pydantic>=2.6.0",
        "pandas>=2.2.0",
        "jinja2>=3.1.0",
    ],

    extras_require={
        "test": [
            "pytest>=7.0",
        ]
    },

    entry_points={
        "console_scripts": [
            "compliance-inspector=compliance_inspector.main:main"
        ]
    },

    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Intended Audience :: Developers",
        "Topic :: Security",
        "Topic :: Software Development :: Quality Assurance",
    ],

    keywords="compliance audit security iac bicep rbac zero-trust scanner",
    license="MIT",
)
