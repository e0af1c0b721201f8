import setuptools

setuptools.setup(
    name="dicebot",
    version="0.1.0",
    classifiers=["Programming Language :: Python :: 3"],
    python_requires=">=3.9",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    package_data={"dicebot": ["roll.lark", "settings.default.yaml"]},
    entry_points={"console_scripts": ["dicebot=dicebot.__main__:main"]},
    install_requires=[
        "lark",
        "discord.py",
        "pyyaml",
        "plotly",
        "kaleido",
        "pandas",
        "numpy",
    ],
    extras_require={"test": ["pytest"]},
)
