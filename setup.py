from setuptools import setup, find_packages

with open('README.md', 'r', encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='duet',
    version='0.1.0',
    description='Run documents that interleave Python and R code blocks with shared bindings',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
    install_requires=[
        'numpy>=1.20.0',
        'pandas>=1.3.0',
        'matplotlib>=3.5.0',
        'PyYAML>=6.0',
    ],
    extras_require={
        'r_integration': ['rpy2>=3.5.0'],
        'examples': ['statsmodels>=0.13.0'],
        'dev': ['pytest', 'flake8', 'black'],
    },
    entry_points={
        'console_scripts': [
            'duet-render=duet.cli:main',
        ],
    },
    include_package_data=True,
)
