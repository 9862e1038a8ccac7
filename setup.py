from setuptools import setup, find_packages
from os import path

here = path.abspath(path.dirname(__file__))

with open(path.join(here, 'requirements.txt')) as f:
    reqs = f.read().split()

with open(path.join(here, 'README.md')) as f:
    readme = f.read()

with open(path.join(here, 'puzcodec', 'version')) as f:
    version = f.read().strip()

setup(
    name='puzcodec',
    version=version,
    description='Read, verify, edit and write AcrossLite .puz crossword files',
    long_description=readme,
    long_description_content_type='text/markdown',
    classifiers=[
        'Environment :: Console',
        'Programming Language :: Python :: 3',
        'Topic :: Games/Entertainment :: Puzzle Games',
    ],
    packages=find_packages(exclude=['test']),
    python_requires='>=3.9',
    install_requires=reqs,
    extras_require={
        'test': ['pytest'],
    },
    package_data={
        'puzcodec': ['version']
    },
    entry_points={
        'console_scripts': [
            'puzcodec=puzcodec:main',
        ],
    },
    keywords='puz crossword crosswords xword xwords puzzle acrosslite'
)
