"""
Setup script for the Shared-Medium Hub Simulator.
"""

from setuptools import setup, find_packages

setup(
    name="hub_simulator",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        'test': ['pytest>=7'],
    },
    entry_points={
        'console_scripts': [
            'hub_simulator=HUB_SIM.main:main',
        ],
    },
    description="A shared-medium hub simulator with a framed stop-and-wait link-layer protocol",
    keywords="network, simulator, hub, datalink, stop-and-wait",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Education",
        "Programming Language :: Python :: 3",
        "Topic :: Education",
        "Topic :: System :: Networking",
    ],
)
