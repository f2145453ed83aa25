from setuptools import setup, find_packages

setup(
    name='kindctl',
    version='0.1.0',
    packages=find_packages(exclude=['kindctl.tests', 'kindctl.tests.*']),
    include_package_data=True,
    package_data={
        'kindctl.templates': ['*.j2'],
    },
    install_requires=[
        'typer',
        'pyyaml',
        'jsonschema',
        'pydantic>=2',
        'jinja2',
        'python-dotenv',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'kindctl=kindctl.cli:app'
        ]
    },
    description='Create local multi-node Kubernetes clusters on Multipass VMs',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
