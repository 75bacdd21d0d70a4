from setuptools import setup, find_packages

setup(
    name='chainkg',
    version='0.1.0',
    author='Marc Hadfield',
    author_email='marc@vital.ai',
    description='Forward-chaining inference over binary relations with provenance',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    url='https://github.com/vital-ai/chainkg',
    packages=find_packages(exclude=["test", "test.*", "test_data"]),
    license='Apache License 2.0',
    install_requires=[

        'pandas',
        'pyyaml',
        'tqdm',

        'lark>=1.2.2'

    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.11',
)
