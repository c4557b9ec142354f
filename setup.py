#!/usr/bin/env python

from setuptools import setup, find_packages

with open('marconi/__init__.py') as fid:
    for line in fid:
        if line.startswith('__version__'):
            VERSION = line.strip().split()[-1][1:-1]
            break

LONG_DESCRIPTION = """
	marconi models linear n-port networks from their scattering parameters,
	reads and writes Touchstone files and computes two-port stability and gain.
"""
setup(name='marconi',
	version=VERSION,
	license='MIT',
	description='N-port network models and Touchstone files',
	long_description=LONG_DESCRIPTION,
	packages=find_packages(),
	python_requires='>=3.9',
	install_requires = [
		'numpy',
		'scipy',
		],
	extras_require = {
		'test': ['pytest'],
		},
	package_dir={'marconi':'marconi'},
	include_package_data = True,
	package_data = {'marconi':['tests/*.s*p', 'io/tests/*.s*p']},
	)
