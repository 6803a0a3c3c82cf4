# Python version 3.8 and up.
from setuptools import setup, find_packages
from codecs import open
from os import path


here = path.abspath(path.dirname(__file__))

# Get the long description from the README file
with open(path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

# Stdlib only at run time.
install_reqs = []

setup(
    version='1.0.0',
    name='stunsniff',
    description='TCP relay that spots TURN peer addresses and launches a UDP demux tool',
    keywords=('STUN, TURN, XOR-PEER-ADDRESS, TCP relay, proxy, NAT traversal, demux, python'),
    long_description_content_type="text/markdown",
    long_description=long_description,
    license='public domain',
    package_dir={"": "."},
    packages=find_packages(exclude=('tests', 'docs', 'examples')),
    python_requires='>=3.8',
    install_requires=install_reqs,
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['stunsniff=stunsniff.entry_point:main'],
    },
    classifiers=[
        'Intended Audience :: Developers',
        'Programming Language :: Python :: 3'
    ],
)
