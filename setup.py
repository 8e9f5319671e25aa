from setuptools import setup, find_packages

setup(
	name='bro-build',
	version='0.0.1',
	description='A build library where the build program is its own build script',
	packages=find_packages(exclude=['tests', 'tests.*']),
	python_requires='>=3.10',
	install_requires=[
		'argh',
	],
	extras_require={
		'test': ['pytest'],
	},
	entry_points = {
		'console_scripts': ['bro=bro.__main__:entrypoint'],
	},
)
