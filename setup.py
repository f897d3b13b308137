from setuptools import setup, find_packages

requires = [
    "cryptography >= 42",
    "pyOpenSSL >= 23.2.0",
    "python-dateutil",
]

setup(
    name="toffee",
    version="0.3.0",
    python_requires=">=3.7",
    description="toffee",
    long_description="""
Toffee generates X.509 certificates for TLS servers: self-signed, or signed
by a parent certificate and key kept in PEM files. It picks the key
algorithm (RSA, ECDSA on P-224/P-256/P-384/P-521 or Ed25519), builds the
certificate for a list of host names and IP addresses, and writes the
certificate and its PKCS#8 key as PEM files.

It can also verify a certificate against a single trusted root for a given
DNS name, which is handy for checking what was just generated.
      """,
    classifiers=[
        "Programming Language :: Python",
        "Topic :: Security :: Cryptography",
    ],
    keywords="certificates x509 ca cert ssl tls",
    packages=find_packages(exclude=["tests"]),
    include_package_data=True,
    zip_safe=False,
    test_suite="tests",
    install_requires=requires,
    entry_points="""\
      [console_scripts]
      toffee_generate = toffee.scripts.generate:main
      toffee_verify = toffee.scripts.verify:main
      """,
)
