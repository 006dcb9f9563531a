"""
判题模板

把用户代码拼装成代码执行服务可以直接运行的完整程序，每种编程语言对应一个模板类。
模板只负责生成源代码和标准输入，不执行任何代码。
"""
import re
import logging

from .models import PreparedProgram
from .charcodec import encode_char_array, parse_char_array

logger = logging.getLogger(__name__)


# 编程语言名称 -> Judge0 语言 ID
LANGUAGE_IDS: dict[str, int] = {
    "javascript": 63,  # Node.js
    "typescript": 74,
    "python": 71,      # Python 3
    "java": 62,        # JDK
    "cpp": 54,         # C++ (GCC)
    "c": 50,           # C (GCC)
    "csharp": 51,
    "ruby": 72,
    "go": 60,
    "rust": 73,
    "php": 68,
    "swift": 83,
    "kotlin": 78,
}

# 未知语言统一按 Python 3 提交
FALLBACK_LANGUAGE = "python"


def resolve_language_id(language: str) -> int:
    language_id = LANGUAGE_IDS.get(language)
    if language_id is None:
        logger.warning("Unknown language %r, falling back to %s", language, FALLBACK_LANGUAGE)
        language_id = LANGUAGE_IDS[FALLBACK_LANGUAGE]
    return language_id


class LanguageTemplate:
    name: str = ""
    # 为真时字符数组输入以扁平字符串传入，输出同样按扁平字符串解析
    flat_char_arrays: bool = False

    def prepare(self, code: str, starter_code: str, test_input: str) -> PreparedProgram:
        return PreparedProgram(
            source_code=self.render(code, starter_code),
            stdin=self.encode_input(test_input)
        )

    def render(self, code: str, starter_code: str) -> str:
        return code

    def encode_input(self, test_input: str) -> str:
        if self.flat_char_arrays:
            chars = parse_char_array(test_input.strip())
            if chars is not None:
                return encode_char_array(chars)
        return test_input


class PassThroughTemplate(LanguageTemplate):
    """
    没有专门模板的语言，原样提交用户代码
    """


_PYTHON_HARNESS = '''

import sys as _arena_sys
import json as _arena_json


def _arena_main():
    raw = _arena_sys.stdin.read().strip()
    if not raw:
        return
    args = _arena_json.loads(raw.replace("'", '"'))
    if "Solution" in globals():
        target = getattr(Solution(), "__ENTRY__")
    else:
        target = __ENTRY__
    if isinstance(args, list) and len(args) == 2 and isinstance(args[0], list) and isinstance(args[1], (int, str)):
        call_args = args
    else:
        call_args = [args]
    result = target(*call_args)
    if result is None:
        result = call_args[0]
    print(_arena_json.dumps(result, separators=(",", ":"), ensure_ascii=False))


_arena_main()
'''


class PythonTemplate(LanguageTemplate):
    name = "python"
    _def_pattern = re.compile(r"^\s*def\s+(?!__)([A-Za-z_]\w*)\s*\(", re.M)

    def entry_name(self, code: str, starter_code: str) -> str:
        for source in (starter_code, code):
            match = self._def_pattern.search(source)
            if match:
                return match.group(1)
        return "solve"

    def render(self, code: str, starter_code: str) -> str:
        harness = _PYTHON_HARNESS.replace("__ENTRY__", self.entry_name(code, starter_code))
        return f"{starter_code}\n\n{code}\n{harness}"


_JAVASCRIPT_HARNESS = '''

const __arenaRaw = require("fs").readFileSync(0, "utf8").trim();
if (__arenaRaw) {
  const __arenaArgs = JSON.parse(__arenaRaw.replace(/'/g, '"'));
  const __arenaTarget = typeof Solution !== "undefined"
    ? (...args) => new Solution().__ENTRY__(...args)
    : __ENTRY__;
  const __arenaCallArgs = (
    Array.isArray(__arenaArgs) && __arenaArgs.length === 2 && Array.isArray(__arenaArgs[0])
    && (typeof __arenaArgs[1] === "number" || typeof __arenaArgs[1] === "string")
  ) ? __arenaArgs : [__arenaArgs];
  let __arenaResult = __arenaTarget(...__arenaCallArgs);
  if (__arenaResult === undefined) {
    __arenaResult = __arenaCallArgs[0];
  }
  console.log(JSON.stringify(__arenaResult));
}
'''


class JavaScriptTemplate(LanguageTemplate):
    name = "javascript"
    _patterns = (
        re.compile(r"function\s+([A-Za-z_$][\w$]*)\s*\("),
        re.compile(r"(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*(?:function\b|\([^)]*\)\s*=>|[A-Za-z_$][\w$]*\s*=>)"),
    )
    _method_pattern = re.compile(r"^\s+(?!constructor\b|if\b|for\b|while\b|switch\b)([A-Za-z_$][\w$]*)\s*\([^)]*\)\s*\{", re.M)

    def entry_name(self, code: str, starter_code: str) -> str:
        for source in (starter_code, code):
            if re.search(r"\bclass\s+Solution\b", source):
                match = self._method_pattern.search(source)
                if match:
                    return match.group(1)
            for pattern in self._patterns:
                match = pattern.search(source)
                if match:
                    return match.group(1)
        return "solve"

    def render(self, code: str, starter_code: str) -> str:
        # 重复声明 class 在 JavaScript 中是语法错误，所以这里不拼接初始代码
        harness = _JAVASCRIPT_HARNESS.replace("__ENTRY__", self.entry_name(code, starter_code))
        return f"{code}\n{harness}"


class MethodSignature:
    def __init__(self, return_type: str, name: str, param_type: str):
        self.return_type = return_type
        self.name = name
        self.param_type = param_type


_JAVA_READERS = {
    "char[]": "line.toCharArray()",
    "String": "stripQuotes(line)",
    "int": "Integer.parseInt(line.trim())",
    "long": "Long.parseLong(line.trim())",
    "double": "Double.parseDouble(line.trim())",
    "boolean": "Boolean.parseBoolean(line.trim())",
    "int[]": "parseIntArray(line)",
}

_JAVA_WRITERS = {
    "char[]": "new String({value})",
    "int[]": "intArrayToJson({value})",
}

_JAVA_MAIN = '''
public class Main {
    public static void main(String[] args) {
        Scanner scanner = new Scanner(System.in);
        String line = scanner.hasNextLine() ? scanner.nextLine() : "";
        scanner.close();

        __PARAM_TYPE__ arg = __READ__;
        Solution solution = new Solution();
        __CALL__
    }

    static String stripQuotes(String text) {
        String trimmed = text.trim();
        if (trimmed.length() >= 2 && trimmed.startsWith("\\"") && trimmed.endsWith("\\"")) {
            return trimmed.substring(1, trimmed.length() - 1);
        }
        return trimmed;
    }

    static int[] parseIntArray(String text) {
        String body = text.trim().replaceAll("^\\\\[|\\\\]$", "").trim();
        if (body.isEmpty()) {
            return new int[0];
        }
        String[] parts = body.split(",");
        int[] values = new int[parts.length];
        for (int i = 0; i < parts.length; i++) {
            values[i] = Integer.parseInt(parts[i].trim());
        }
        return values;
    }

    static String intArrayToJson(int[] values) {
        StringBuilder builder = new StringBuilder("[");
        for (int i = 0; i < values.length; i++) {
            if (i > 0) {
                builder.append(",");
            }
            builder.append(values[i]);
        }
        return builder.append("]").toString();
    }
}
'''


class JavaTemplate(LanguageTemplate):
    name = "java"
    flat_char_arrays = True
    _signature_pattern = re.compile(
        r"public\s+(?:static\s+)?([\w\[\]]+)\s+(\w+)\s*\(\s*(?:final\s+)?([\w\[\]]+)\s+\w+\s*\)"
    )
    _import_pattern = re.compile(r"^\s*import\s+[\w.*]+\s*;\s*$", re.M)

    def signature(self, code: str) -> MethodSignature | None:
        for match in self._signature_pattern.finditer(code):
            return_type, name, param_type = match.groups()
            if name != "main" and param_type in _JAVA_READERS:
                return MethodSignature(return_type, name, param_type)
        return None

    def render(self, code: str, starter_code: str) -> str:
        if "public static void main" in code:
            return code
        signature = self.signature(code) or self.signature(starter_code)
        if signature is None:
            return code

        imports = self._import_pattern.findall(code)
        body = self._import_pattern.sub("", code).strip()
        if re.search(r"\bclass\s+Solution\b", body):
            # 同一文件只能有一个 public 类
            body = re.sub(r"\bpublic\s+(class\s+Solution)\b", r"\1", body)
        else:
            body = f"class Solution {{\n    {body}\n}}"

        if signature.return_type == "void":
            printed = _JAVA_WRITERS.get(signature.param_type, "String.valueOf({value})").format(value="arg")
            call = f"solution.{signature.name}(arg);\n        System.out.println({printed});"
        else:
            printed = _JAVA_WRITERS.get(signature.return_type, "String.valueOf({value})").format(value="result")
            call = (
                f"{signature.return_type} result = solution.{signature.name}(arg);\n"
                f"        System.out.println({printed});"
            )
        main = (
            _JAVA_MAIN
            .replace("__PARAM_TYPE__", signature.param_type)
            .replace("__READ__", _JAVA_READERS[signature.param_type])
            .replace("__CALL__", call)
        )
        header = "\n".join(["import java.util.*;", *[line.strip() for line in imports]])
        return f"{header}\n{main}\n{body}\n"


_CPP_READERS = {
    "vector<char>": "parseCharArray(line)",
    "vector<int>": "parseIntArray(line)",
    "string": "stripQuotes(line)",
    "int": "stoi(line)",
    "long": "stol(line)",
    "double": "stod(line)",
    "bool": "(line.find(\"true\") != string::npos)",
}

_CPP_WRITERS = {
    "vector<char>": "charArrayToJson({value})",
    "vector<int>": "intArrayToJson({value})",
    "bool": "({value} ? \"true\" : \"false\")",
}

_CPP_PRELUDE = '''#include <iostream>
#include <vector>
#include <string>
#include <sstream>
#include <algorithm>
using namespace std;
'''

_CPP_MAIN = '''
string stripQuotes(string input) {
    input.erase(0, input.find_first_not_of(" \\t\\r\\n"));
    input.erase(input.find_last_not_of(" \\t\\r\\n") + 1);
    if (input.size() >= 2 && input.front() == '"' && input.back() == '"') {
        return input.substr(1, input.size() - 2);
    }
    return input;
}

vector<char> parseCharArray(string input) {
    vector<char> result;
    input = stripQuotes(input);
    if (input.size() < 2) return result;
    input = input.substr(1, input.size() - 2);
    stringstream ss(input);
    string item;
    while (getline(ss, item, ',')) {
        item.erase(remove_if(item.begin(), item.end(), [](char c) { return c == '"' || c == '\\'' || c == ' '; }), item.end());
        if (!item.empty()) {
            result.push_back(item[0]);
        }
    }
    return result;
}

vector<int> parseIntArray(string input) {
    vector<int> result;
    input = stripQuotes(input);
    if (input.size() < 2) return result;
    input = input.substr(1, input.size() - 2);
    stringstream ss(input);
    string item;
    while (getline(ss, item, ',')) {
        if (item.find_first_not_of(" ") != string::npos) {
            result.push_back(stoi(item));
        }
    }
    return result;
}

string charArrayToJson(const vector<char>& values) {
    string out = "[";
    for (size_t i = 0; i < values.size(); ++i) {
        if (i > 0) out += ",";
        out += "\\"";
        out += values[i];
        out += "\\"";
    }
    return out + "]";
}

string intArrayToJson(const vector<int>& values) {
    string out = "[";
    for (size_t i = 0; i < values.size(); ++i) {
        if (i > 0) out += ",";
        out += to_string(values[i]);
    }
    return out + "]";
}

int main() {
    string line;
    getline(cin, line);

    __PARAM_TYPE__ arg = __READ__;
    Solution solution;
    __CALL__
    return 0;
}
'''


class CppTemplate(LanguageTemplate):
    name = "cpp"
    _signature_pattern = re.compile(
        r"([\w:<>]+)\s+(\w+)\s*\(\s*(?:const\s+)?([\w:<>]+)\s*&?\s*\w+\s*\)"
    )

    def signature(self, code: str) -> MethodSignature | None:
        for match in self._signature_pattern.finditer(code):
            return_type, name, param_type = (group.replace("std::", "") for group in match.groups())
            if name != "main" and param_type in _CPP_READERS:
                return MethodSignature(return_type, name, param_type)
        return None

    def render(self, code: str, starter_code: str) -> str:
        if "int main(" in code:
            return code
        signature = self.signature(code) or self.signature(starter_code)
        if signature is None:
            return code

        body = code.strip()
        if not re.search(r"\bclass\s+Solution\b", body):
            body = f"class Solution {{\npublic:\n    {body}\n}};"

        if signature.return_type == "void":
            printed = _CPP_WRITERS.get(signature.param_type, "{value}").format(value="arg")
            call = f"solution.{signature.name}(arg);\n    cout << {printed} << endl;"
        else:
            printed = _CPP_WRITERS.get(signature.return_type, "{value}").format(value="result")
            call = f"auto result = solution.{signature.name}(arg);\n    cout << {printed} << endl;"
        main = (
            _CPP_MAIN
            .replace("__PARAM_TYPE__", signature.param_type)
            .replace("__READ__", _CPP_READERS[signature.param_type])
            .replace("__CALL__", call)
        )
        return f"{_CPP_PRELUDE}\n{body}\n{main}"


_CSHARP_READERS = {
    "char[]": "JsonSerializer.Deserialize<char[]>(NormalizeQuotes(line))",
    "int[]": "JsonSerializer.Deserialize<int[]>(line)",
    "string": "StripQuotes(line)",
    "int": "int.Parse(line.Trim())",
    "long": "long.Parse(line.Trim())",
    "double": "double.Parse(line.Trim(), CultureInfo.InvariantCulture)",
    "bool": "bool.Parse(line.Trim())",
}

_CSHARP_WRITERS = {
    "char[]": "JsonSerializer.Serialize({value})",
    "int[]": "JsonSerializer.Serialize({value})",
    "double": "{value}.ToString(CultureInfo.InvariantCulture)",
    "bool": "({value} ? \"true\" : \"false\")",
}

_CSHARP_USINGS = (
    "using System;",
    "using System.Collections.Generic;",
    "using System.Globalization;",
    "using System.Linq;",
    "using System.Text.Json;",
)

_CSHARP_MAIN = r'''
public class Program {
    public static void Main(string[] args) {
        string line = Console.ReadLine() ?? "";

        __PARAM_TYPE__ arg = __READ__;
        Solution solution = new Solution();
        __CALL__
    }

    static string NormalizeQuotes(string text) {
        return text.Replace('\'', '"');
    }

    static string StripQuotes(string text) {
        string trimmed = text.Trim();
        if (trimmed.Length >= 2 && trimmed[0] == '"' && trimmed[trimmed.Length - 1] == '"') {
            return trimmed.Substring(1, trimmed.Length - 2);
        }
        return trimmed;
    }
}
'''


class CSharpTemplate(LanguageTemplate):
    name = "csharp"
    _signature_pattern = re.compile(
        r"public\s+(?:static\s+)?([\w\[\]]+)\s+(\w+)\s*\(\s*([\w\[\]]+)\s+\w+\s*\)"
    )
    _using_pattern = re.compile(r"^\s*using\s+[\w.]+\s*;\s*$", re.M)

    def signature(self, code: str) -> MethodSignature | None:
        for match in self._signature_pattern.finditer(code):
            return_type, name, param_type = match.groups()
            if name != "Main" and param_type in _CSHARP_READERS:
                return MethodSignature(return_type, name, param_type)
        return None

    def render(self, code: str, starter_code: str) -> str:
        if "static void Main" in code:
            return code
        signature = self.signature(code) or self.signature(starter_code)
        if signature is None:
            return code

        usings = [line.strip() for line in self._using_pattern.findall(code)]
        body = self._using_pattern.sub("", code).strip()
        if not re.search(r"\bclass\s+Solution\b", body):
            body = f"public class Solution {{\n    {body}\n}}"

        if signature.return_type == "void":
            printed = _CSHARP_WRITERS.get(signature.param_type, "{value}").format(value="arg")
            call = f"solution.{signature.name}(arg);\n        Console.WriteLine({printed});"
        else:
            printed = _CSHARP_WRITERS.get(signature.return_type, "{value}").format(value="result")
            call = (
                f"var result = solution.{signature.name}(arg);\n"
                f"        Console.WriteLine({printed});"
            )
        main = (
            _CSHARP_MAIN
            .replace("__PARAM_TYPE__", signature.param_type)
            .replace("__READ__", _CSHARP_READERS[signature.param_type])
            .replace("__CALL__", call)
        )
        header = "\n".join([*_CSHARP_USINGS, *[using for using in usings if using not in _CSHARP_USINGS]])
        return f"{header}\n{main}\n{body}\n"


LANGUAGE_TEMPLATES: dict[str, LanguageTemplate] = {
    template.name: template
    for template in (PythonTemplate(), JavaScriptTemplate(), JavaTemplate(), CppTemplate(), CSharpTemplate())
}

_pass_through = PassThroughTemplate()


def get_template(language: str) -> LanguageTemplate:
    return LANGUAGE_TEMPLATES.get(language, _pass_through)


def prepare(code: str, language: str, starter_code: str, test_input: str) -> PreparedProgram:
    return get_template(language).prepare(code, starter_code or "", test_input)
