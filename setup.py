from setuptools import setup, find_packages

setup(
    name='minipack',
    version='0.1.0',
    py_modules=['pack', 'builder'],
    python_requires='>=3.10',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'lark',
        'pydantic>=2.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'minipack = pack:main',
        ],
    },
)
