# tests/test_kernel_template.py
"""
Unit tests for KernelTemplate placeholder substitution.
"""

import pytest
from clspread import ConfigurationError, KernelTemplate


SOURCE = """
__constant uchar data[8] = DATA;
__constant uchar magic[8] = MAGIC;
#define IV_LO IV0
#define IV_HI IV1
#define IV_SIZE 2
"""


class TestKernelTemplate:
    """Test textual substitution before compilation."""

    def test_replace_scalar(self):
        template = KernelTemplate(SOURCE)
        template.replace("IV0", 305419896).replace("IV1", 0)

        rendered = template.render()
        assert "#define IV_LO 305419896" in rendered
        assert "#define IV_HI 0" in rendered

    def test_replace_array(self):
        template = KernelTemplate(SOURCE)
        template.replace_array("DATA", bytes.fromhex("0102abff00000010"))

        assert "data[8] = { 0x01, 0x02, 0xab, 0xff, 0x00, 0x00, 0x00, 0x10 };" in template.render()

    def test_replace_array_from_list(self):
        template = KernelTemplate("x = MAGIC;")
        template.replace_array("MAGIC", [1, 2, 3])

        assert template.render() == "x = { 0x01, 0x02, 0x03 };"

    def test_whole_word_only(self):
        template = KernelTemplate("IV0 IV01 MY_IV0")
        template.replace("IV0", 7)

        assert template.render() == "7 IV01 MY_IV0"

    def test_every_occurrence_replaced(self):
        template = KernelTemplate("N + N * N")
        template.replace("N", 3)

        assert str(template) == "3 + 3 * 3"

    def test_bool_value(self):
        template = KernelTemplate("#define FLAG FLAG_VALUE")
        template.replace("FLAG_VALUE", True)

        assert template.render() == "#define FLAG 1"

    def test_missing_placeholder(self):
        template = KernelTemplate(SOURCE)
        with pytest.raises(ConfigurationError):
            template.replace("NONCE", 1)

    def test_render_is_plain_string(self):
        template = KernelTemplate(SOURCE)
        rendered = template.render()
        template.replace("IV0", 1)

        assert "IV0" in rendered
        assert "IV0" not in template.render()
