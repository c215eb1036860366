from setuptools import setup, find_packages

setup(
    name="golflesson",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"golflesson": ["py.typed"]},
    python_requires=">=3.10",
    install_requires=[
        'PyYAML>=6.0',
        'icalendar>=5.0.0',
        'tabulate>=0.9.0',
        'typing_extensions>=4.5.0',
        'resend>=2.0.0'
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'coverage>=7.0.0'
        ]
    },
    entry_points={
        'console_scripts': [
            'golflesson=golflesson.cli:main'
        ]
    }
)
