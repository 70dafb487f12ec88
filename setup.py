"""Setup script for beamdiag package."""

from setuptools import setup, find_packages

setup(
    name='beamdiag',
    version='1.0',
    packages=find_packages(include=['beamdiag', 'beamdiag.*']),
    python_requires='>=3.9',
    install_requires=[
        'numpy>=1.20.0',
        'pyyaml>=5.4',
        'matplotlib>=3.3.0',
    ],
    extras_require={
        'gpu': ['cupy-cuda12x'],
        'test': ['pytest>=7.0'],
    },
)
