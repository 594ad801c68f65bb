"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='deriving',
	version='0.1.0',
	packages=['deriving', "deriving.adapters", ],
	entry_points={
		'console_scripts': ["deriving = deriving.cmdline:main"],
	},
	license='MIT',
	description='Type-directed generation of encoders, decoders, and shadow types from algebraic type declarations',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.12",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Topic :: Software Development :: Code Generators",
		"Environment :: Console",
    ],
	python_requires='>=3.12',
	install_requires=[
		"booze-tools>=0.6.2.1",
	]
)
