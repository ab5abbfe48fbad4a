from setuptools import setup, find_packages

setup(
    name='pound',
    version='0.1.0',
    description='Text-buffer engine for a terminal editor: tab rendering, incremental highlighting and search',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'pygments>=2.13.0',
        'toml>=0.10.2',
        'wcwidth>=0.2.6',
        'chardet>=5.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
        'Programming Language :: Python :: 3.11',
    ],
    python_requires='>=3.11',
    license='GPLv3',
)
