from setuptools import setup, find_packages

setup(
    name             = 'phonescan',
    version          = '1.0.0',
    description      = 'phonescan - Android SMS, call log & contact ingestion with rule-based risk flags',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest>=7', 'httpx>=0.24'],
    },
    entry_points     = {
        'console_scripts': [
            'phonescan = phonescan.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
