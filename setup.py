from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="letterbox",
    version="0.1.0",
    author="Laurence Stephan",
    author_email="your.email@example.com",
    description="Newsletter subscription service for Flask: signup form, welcome emails and token based unsubscribe",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/letterbox",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Communications :: Email",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: Flask",
    ],
    python_requires=">=3.9",
    install_requires=[
        "Flask>=3.0.0",
        "Flask-SQLAlchemy>=3.1.0",
        "Flask-CORS>=4.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "resend": [
            "resend>=0.7",
        ],
        "dev": [
            "pytest>=7.0",
            "pytest-flask>=1.2",
            "black>=22.0",
            "flake8>=5.0",
        ],
    },
    include_package_data=True,
    package_data={
        "letterbox": [
            "modules/*/templates/**/*.html",
        ],
    },
    zip_safe=False,
)
