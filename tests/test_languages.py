from core.judge.languages import prepare, resolve_language_id, get_template, PassThroughTemplate

PYTHON_STARTER = """class Solution:
    def reverseString(self, s):
        pass
"""

PYTHON_CODE = """class Solution:
    def reverseString(self, s):
        s.reverse()
"""

JAVA_METHOD = """public void reverseString(char[] s) {
    for (int i = 0, j = s.length - 1; i < j; i++, j--) {
        char tmp = s[i];
        s[i] = s[j];
        s[j] = tmp;
    }
}"""

JAVA_FULL_PROGRAM = """import java.util.*;

public class Main {
    public static void main(String[] args) {
        System.out.println("hi");
    }
}"""

CPP_CLASS = """class Solution {
public:
    void reverseString(vector<char>& s) {
        reverse(s.begin(), s.end());
    }
};"""


def test_python_harness_calls_solution_method():
    program = prepare(PYTHON_CODE, "python", PYTHON_STARTER, '["h","i"]')
    assert program.stdin == '["h","i"]'
    assert program.source_code.index(PYTHON_STARTER) < program.source_code.index(PYTHON_CODE)
    assert 'getattr(Solution(), "reverseString")' in program.source_code
    assert "_arena_main()" in program.source_code


def test_python_harness_calls_plain_function():
    program = prepare("def add(a, b):\n    return a + b\n", "python", "", "[[1, 2], 3]")
    assert "target = add" in program.source_code


def test_javascript_harness_with_function_expression():
    code = "var reverseString = function(s) {\n  s.reverse();\n};"
    program = prepare(code, "javascript", "", '["a","b"]')
    assert program.source_code.startswith(code)
    assert ": reverseString;" in program.source_code
    assert 'readFileSync(0, "utf8")' in program.source_code


def test_javascript_harness_with_solution_class():
    code = "class Solution {\n  reverseString(s) {\n    s.reverse();\n  }\n}"
    program = prepare(code, "javascript", "", '["a","b"]')
    assert "new Solution().reverseString(...args)" in program.source_code


def test_java_entry_point_is_synthesized():
    program = prepare(JAVA_METHOD, "java", "", '["h","e","l","l","o"]')
    source = program.source_code
    assert program.stdin == "hello"
    assert "public class Main" in source
    assert "char[] arg = line.toCharArray();" in source
    assert "solution.reverseString(arg);" in source
    assert "System.out.println(new String(arg));" in source
    assert "class Solution {" in source


def test_java_full_program_is_not_wrapped_again():
    program = prepare(JAVA_FULL_PROGRAM, "java", "", "hello")
    assert program.source_code == JAVA_FULL_PROGRAM


def test_java_imports_are_hoisted_and_public_solution_is_demoted():
    code = (
        "import java.util.HashMap;\n"
        "public class Solution {\n"
        "    public int firstUniqChar(String s) {\n"
        "        return new HashMap<Character, Integer>().size();\n"
        "    }\n"
        "}"
    )
    program = prepare(code, "java", "", '"leetcode"')
    source = program.source_code
    assert source.startswith("import java.util.*;\nimport java.util.HashMap;")
    assert "public class Solution" not in source
    assert "String arg = stripQuotes(line);" in source
    assert "int result = solution.firstUniqChar(arg);" in source
    # 非字符数组的输入原样传入
    assert program.stdin == '"leetcode"'


def test_cpp_entry_point_is_synthesized():
    program = prepare(CPP_CLASS, "cpp", "", '["h","i"]')
    source = program.source_code
    assert program.stdin == '["h","i"]'
    assert source.startswith("#include <iostream>")
    assert "vector<char> arg = parseCharArray(line);" in source
    assert "solution.reverseString(arg);" in source
    assert "cout << charArrayToJson(arg) << endl;" in source


def test_cpp_with_main_is_passed_through():
    code = "#include <iostream>\nint main() { return 0; }"
    assert prepare(code, "cpp", "", "").source_code == code


def test_unknown_language_is_passed_through():
    assert isinstance(get_template("ruby"), PassThroughTemplate)
    program = prepare("puts gets", "ruby", None, "['a']")
    assert program.source_code == "puts gets"
    assert program.stdin == "['a']"


def test_language_id_table_and_fallback():
    assert resolve_language_id("python") == 71
    assert resolve_language_id("java") == 62
    assert resolve_language_id("cpp") == 54
    assert resolve_language_id("brainfuck") == 71


CSHARP_METHOD = """public void ReverseString(char[] s) {
    Array.Reverse(s);
}"""


def test_csharp_entry_point_is_synthesized():
    program = prepare(CSHARP_METHOD, "csharp", "", "['h','i']")
    source = program.source_code
    # C# 入口程序按 JSON 读取字符数组，输入保持原样
    assert program.stdin == "['h','i']"
    assert source.startswith("using System;")
    assert "using System.Text.Json;" in source
    assert "char[] arg = JsonSerializer.Deserialize<char[]>(NormalizeQuotes(line));" in source
    assert "solution.ReverseString(arg);" in source
    assert "Console.WriteLine(JsonSerializer.Serialize(arg));" in source
    assert "public class Solution {" in source


def test_csharp_usings_are_hoisted_into_existing_solution():
    code = (
        "using System.Text;\n"
        "public class Solution {\n"
        "    public bool IsPalindrome(string s) {\n"
        "        return new StringBuilder(s).ToString() == s;\n"
        "    }\n"
        "}"
    )
    source = prepare(code, "csharp", "", '"racecar"').source_code
    assert source.index("using System.Text;") < source.index("public class Program")
    assert source.count("class Solution") == 1
    assert "string arg = StripQuotes(line);" in source
    assert 'Console.WriteLine((result ? "true" : "false"));' in source


def test_csharp_with_main_is_passed_through():
    code = "class Program {\n    static void Main(string[] args) {\n    }\n}"
    assert prepare(code, "csharp", "", "").source_code == code


def test_java_char_array_with_edge_whitespace():
    program = prepare(JAVA_METHOD, "java", "", '["a"," "]')
    assert program.stdin == "a "
