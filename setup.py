from setuptools import setup, find_packages

setup(
    name="field-validation-lib",
    version="0.1.0",
    description="Declarative field validation from pipe-delimited rule strings",
    author="Jude Payne",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        'field_validation': ['local-config.yaml', 'locales/*.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'pyyaml>=6.0',
        'jsonschema>=4.17.0',
        'requests>=2.28.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'field-validation-rpc=field_validation.jsonrpc_server:main',
        ],
    },
    python_requires='>=3.9',
)
