from setuptools import setup, find_packages

setup(
    name='platformctl',
    version='0.1.0',
    packages=find_packages(exclude=['platformctl.tests']),
    include_package_data=True,
    package_data={
        'platformctl.modules': ['templates/*.j2'],
    },
    install_requires=[
        'typer',
        'fastapi',
        'uvicorn',
        'pydantic>=2',
        'jinja2',
        'jsonschema',
        'pyyaml',
        'python-dotenv',
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx',
        ],
    },
    entry_points={
        'console_scripts': [
            'platformctl=platformctl.cli:app'
        ]
    },
    description='Composition engine that resolves EKS platform definitions into bootstrap payloads and add-on install graphs',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
