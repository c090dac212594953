from setuptools import setup, find_packages

setup(
    name='bootstrapctl',
    version='0.1.0',
    packages=find_packages(),
    include_package_data=True,
    install_requires=[
        'typer',
        'fastapi',
        'uvicorn',
        'kubernetes',
        'python-dotenv',
        'pydantic>=2',
        'PyYAML',
        'jsonschema',
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx',
        ],
    },
    entry_points={
        'console_scripts': [
            'bootstrapctl=bootstrapctl.cli:run'
        ]
    },
    author='Your Name',
    description='Checksum-gated reconciliation of kubeadm bootstrap phases for tenant control planes',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
