"""Shared test data"""

SAMPLE_CONTENT = b'v3rv2rv34v4rtvb435rv43rbbv45bv45\nver\nverv2\nrv\n2\n4\n'

# Tree hash of SAMPLE_CONTENT in 4 byte chunks
SAMPLE_TREE_HASH_4 = '04b1765f61ad1d8920dc71889e9bce10aa160ac52b4ca5e9bcae12103cdd51a8'
