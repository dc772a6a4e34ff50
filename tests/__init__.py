# Tests for framesampler package
