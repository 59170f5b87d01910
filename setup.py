""" Installation script for the artefact package.
"""

from setuptools import setup, find_packages
import re
import io

__version__ = re.search(
    r'__version__\s*=\s*[\'"]([^\'"]*)[\'"]',
    io.open('artefact/core/__init__.py', encoding='utf_8_sig').read()
    ).group(1)


def get_readme_contents():
    with io.open('README.md') as readme_file:
        return readme_file.read()


setup(
    name='artefact',
    description='Typed schema definitions compiled to SQLite tables, with a query bridge to an injected host.',
    long_description=get_readme_contents(),
    long_description_content_type='text/markdown',
    version=__version__,
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        'artefact.core': ['schemas/*.schema.json']
    },
    python_requires='>=3.9, <4',
    entry_points={
        'console_scripts': [
            'artefact-schema-cli = artefact.core.schema_cli:main'
        ]
    },
    install_requires=[
        'requests',
        'urllib3>=1.26,<3',
        'portalocker>=1.2.1',
        'jsonschema>=3.1',
        'SQLAlchemy>=1.4.24',
        'python-dateutil'
    ],
    extras_require={
        'test': ['pytest']
    },
    license='Apache 2.0',
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: POSIX',
        'Operating System :: MacOS :: MacOS X',
        'Operating System :: Microsoft :: Windows',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12'
    ]
)
