# Copyright 2025-present CodeScribe Authors. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Prompt templates per (language group, documentation language).

User prompts are `string.Template` sources with these placeholders:
${pr_number} ${author} ${created_date} ${updated_date} ${updated_by}
${filename} ${file_content} ${code_language} ${code_fence}, plus
${existing_doc_content} in update prompts.

The registry is built once at import and is read-only.
"""

from dataclasses import dataclass
from string import Template
from types import MappingProxyType
from typing import Tuple

from codescribe.agents.prompts.languages import LanguageGroup
from codescribe.config import SUPPORTED_DOC_LANGUAGES


@dataclass(frozen=True)
class TemplateSet:
    system_prompt: str
    create_template: str
    update_template: str
    focus_areas: Tuple[str, ...]


# ============ User prompts ============

CREATE_TEMPLATES = {
    'en': """# Documentation Request

Please analyze the following ${code_language} file and generate technical documentation in AsciiDoc format **in English**.

## PR Information
- PR Number: ${pr_number}
- Author: ${author}
- Created Date: ${created_date}
- Last Modified: ${updated_date} by ${updated_by}

## File Information
- Filename: ${filename}
- Language: ${code_language}

## Code
```${code_fence}
${file_content}
```

## Requirements
1. **Generate documentation in English.**
2. Thoroughly analyze the above code and generate developer documentation in AsciiDoc format.
3. The documentation should include all necessary information for developers to understand and use this code.
4. Clearly explain the main functionality, methods, and dependencies of the class/file.
5. Follow the AsciiDoc template format provided in the system prompt exactly.
6. Do not make assumptions about unclear parts; indicate these in the documentation.
7. **All descriptions and comments must be written in English.**
8. Return only the AsciiDoc document without additional explanations.""",

    'ko': """# 코드 문서화 요청

다음 ${code_language} 파일을 분석하여 **한국어로** AsciiDoc 형식의 기술 문서를 생성해주세요.

## PR 정보
- PR 번호: ${pr_number}
- 작성자: ${author}
- 작성일: ${created_date}
- 마지막 수정: ${updated_date} by ${updated_by}

## 파일 정보
- 파일명: ${filename}
- 언어: ${code_language}

## 코드
```${code_fence}
${file_content}
```

## 중요한 요청사항
1. **반드시 한국어로 문서를 작성해주세요.**
2. 위 코드를 철저히 분석하여 AsciiDoc 형식의 개발자 문서를 생성해주세요.
3. 문서는 개발자가 이 코드를 이해하고 사용하는 데 필요한 모든 정보를 포함해야 합니다.
4. 클래스/파일의 주요 기능, 메소드, 의존성 등을 명확하게 설명해주세요.
5. 시스템 프롬프트에서 제공한 AsciiDoc 템플릿 형식을 정확히 따라주세요.
6. 코드에서 명확하지 않은 부분은 추측하지 말고, 문서에 이를 명시해주세요.
7. **모든 설명과 주석은 반드시 한국어로 작성해주세요.**
8. AsciiDoc 문서만 반환해주세요. 추가 설명은 필요 없습니다.""",
}

UPDATE_TEMPLATES = {
    'en': """# Documentation Update Request

The following ${code_language} file has been modified. Please update the existing documentation **in English**.

## PR Information
- PR Number: ${pr_number}
- Author: ${author}
- Created Date: ${created_date}
- Last Modified: ${updated_date} by ${updated_by}

## File Information
- Filename: ${filename}
- Language: ${code_language}

## Current Code
```${code_fence}
${file_content}
```

## Existing Documentation
```asciidoc
${existing_doc_content}
```

## Requirements
1. **Update documentation in English.**
2. Update the existing documentation to reflect the code changes.
3. Add new methods or features to the documentation and remove deleted ones.
4. Maintain the existing document's format and style.
5. Update the PR information section with the latest details.
6. **All descriptions and comments must be written in English.**
7. Return the complete updated AsciiDoc document.""",

    'ko': """# 코드 문서 업데이트 요청

다음 ${code_language} 파일이 변경되었습니다. 기존 문서를 **한국어로** 업데이트해주세요.

## PR 정보
- PR 번호: ${pr_number}
- 작성자: ${author}
- 작성일: ${created_date}
- 마지막 수정: ${updated_date} by ${updated_by}

## 파일 정보
- 파일명: ${filename}
- 언어: ${code_language}

## 현재 코드
```${code_fence}
${file_content}
```

## 기존 문서
```asciidoc
${existing_doc_content}
```

## 중요한 요청사항
1. **반드시 한국어로 문서를 업데이트해주세요.**
2. 변경된 코드를 반영하여 기존 문서를 업데이트해주세요.
3. 새로운 메소드나 기능은 문서에 추가하고, 제거된 것은 삭제해주세요.
4. 기존 문서의 형식과 스타일을 유지해주세요.
5. PR 정보 섹션을 최신 정보로 업데이트해주세요.
6. **모든 설명과 주석은 반드시 한국어로 작성해주세요.**
7. 업데이트된 전체 AsciiDoc 문서를 반환해주세요.""",
}


# ============ System prompts ============

_SYSTEM_PROMPT = {
    'en': Template("""You are a ${expert} documentation expert. Thoroughly analyze the provided code file and generate precise and useful documentation **in English** in AsciiDoc format.

## Important: Document Title Rules
- Use the **filename only** in the document title (=), NOT the full path
- Example: "= UserService.js" (correct), "= src/services/UserService.js" (wrong)

## Specialized Analysis Points
${focus}

## Documentation Principles
- **Write everything clearly and concisely in English.**
- Provide technically accurate descriptions.
- If something is unclear in the code, don't guess; write "The purpose of this section is not clear from the code".
- **Return pure AsciiDoc content without surrounding code fences.**

Use the following AsciiDoc template exactly:

${skeleton}"""),

    'ko': Template("""당신은 ${expert} 문서화 전문가입니다. 제공된 코드 파일을 철저히 분석하여 **한국어로** AsciiDoc 형식의 정확하고 유용한 문서를 생성해야 합니다.

## 중요: 문서 제목 규칙
- 문서 제목(=)에는 반드시 **파일명만** 사용하세요 (전체 경로 X)
- 예시: "= UserService.js" (O), "= src/services/UserService.js" (X)

## 특화 분석 포인트
${focus}

## 문서화 원칙
- **모든 내용을 한국어로 명확하고 간결하게 작성하세요.**
- 기술 용어는 필요시 영어 원문을 괄호 안에 병기할 수 있습니다. 예: "연결 리스트(Linked List)"
- 코드에서 명확하지 않은 부분은 추측하지 말고 "이 부분의 목적은 코드에서 명확하지 않습니다"라고 표시하세요.
- **코드 블록(```)으로 감싸지 않은 순수 AsciiDoc 내용만 반환하세요.**

다음 AsciiDoc 템플릿을 정확히 사용하세요:

${skeleton}"""),
}

_SKELETON = {
    'en': Template("""= {File Name Only}
:toc:
:source-highlighter: highlight.js

== Overview
The `{File Name Only}` is responsible for {main functionality description}.

[cols="1,3"]
|===
|PR Number|#{PR Number}
|Author|@{Author}
|Created Date|{Creation Date}
|Last Modified|{Last Modified Date} by @{Modifier}
${rows}
|===

== Detailed Description
{2-3 paragraphs on purpose, design intentions and role in the system}

== Dependencies
* `{Dependency}` - {Purpose of the dependency}

${sections}

== Important Notes
* {Important considerations when using this code}
* {Known limitations or cautions}"""),

    'ko': Template("""= {파일명만}
:toc:
:source-highlighter: highlight.js

== 개요
`{파일명만}`은(는) {주요 기능 설명}을(를) 담당합니다.

[cols="1,3"]
|===
|PR 번호|#{PR 번호}
|작성자|@{작성자}
|작성일|{작성일}
|마지막 수정|{마지막 수정일} by @{수정자}
${rows}
|===

== 상세 설명
{목적, 설계 의도, 시스템 내 역할을 2-3 문단으로 설명}

== 의존성
* `{의존성}` - {의존성의 용도}

${sections}

== 주의사항
* {이 코드를 사용할 때 고려할 점}
* {알려진 제한사항}"""),
}


# Per-group role, focus areas, extra table rows and sections
_GROUP_PROFILES = {
    LanguageGroup.OOP_CLASS: {
        'expert': {'en': 'object-oriented class', 'ko': '객체지향 클래스'},
        'focus': {
            'en': (
                'Class responsibilities and position in the inheritance hierarchy',
                'Public API: constructors, public methods and their contracts',
                'Encapsulated state and invariants maintained by the class',
                'Design patterns in use (factory, strategy, observer, ...)',
                'Exceptions thrown and their conditions',
            ),
            'ko': (
                '클래스의 책임과 상속 계층 내 위치',
                '공개 API: 생성자, public 메소드와 그 계약',
                '캡슐화된 상태와 클래스가 유지하는 불변 조건',
                '사용된 디자인 패턴 (팩토리, 전략, 옵저버 등)',
                '발생하는 예외와 그 조건',
            ),
        },
        'rows': {'en': '|Class Type|{Class/Abstract Class/Interface/Enum}',
                 'ko': '|클래스 유형|{클래스/추상 클래스/인터페이스/열거형}'},
        'sections': {
            'en': """== Class Structure
=== Fields
* `{fieldName}` (`{Type}`) - {Meaning and constraints}

== Key Methods
=== {methodName}({parameters})
[source,{language}]
----
{Method signature}
----
*Purpose*: {What the method accomplishes}
*Parameters*: `{name}` - {Type and purpose}
*Return Value*: {Return type and meaning}
*Exceptions*: `{ExceptionName}` - {When it occurs}""",
            'ko': """== 클래스 구조
=== 필드
* `{필드명}` (`{타입}`) - {의미와 제약 조건}

== 주요 메소드
=== {메소드명}({매개변수})
[source,{language}]
----
{메소드 시그니처}
----
*목적*: {메소드가 수행하는 일}
*매개변수*: `{이름}` - {타입과 용도}
*반환값*: {반환 타입과 의미}
*예외*: `{예외명}` - {발생 조건}""",
        },
    },
    LanguageGroup.FUNCTIONAL: {
        'expert': {'en': 'functional and module-oriented code', 'ko': '함수형 및 모듈 중심 코드'},
        'focus': {
            'en': (
                'Roles and responsibilities of exported functions',
                'Data flow: input, transformation and output of each function',
                'Purity and side effects (I/O, network, shared state)',
                'Asynchronous processing and error propagation',
                'Module cohesion and coupling with other modules',
            ),
            'ko': (
                '내보낸 함수의 역할과 책임',
                '데이터 흐름: 각 함수의 입력, 변환, 출력',
                '순수성과 부수 효과 (I/O, 네트워크, 공유 상태)',
                '비동기 처리와 오류 전파',
                '모듈 응집도와 다른 모듈과의 결합도',
            ),
        },
        'rows': {'en': '|Module Type|{Function Module/Utility/Service/Library}',
                 'ko': '|모듈 유형|{함수 모듈/유틸리티/서비스/라이브러리}'},
        'sections': {
            'en': """== Main Exported Functions
=== {functionName}
[source,{language}]
----
{Function signature}
----
*Purpose*: {Problem this function solves or transformation it performs}
*Purity*: {Pure function/Has side effects} - {Types of side effects}
*Parameters*: `{parameterName}` (`{Type}`) - {Description}
*Return Value*: `{Type}` - {Meaning of the returned value}

== Data Transformation Flow
1. {Input data format}
2. {Transformation steps}
3. {Output data format}""",
            'ko': """== 주요 내보낸 함수
=== {함수명}
[source,{language}]
----
{함수 시그니처}
----
*목적*: {함수가 해결하는 문제 또는 수행하는 변환}
*순수성*: {순수 함수/부수 효과 있음} - {부수 효과 종류}
*매개변수*: `{매개변수명}` (`{타입}`) - {설명}
*반환값*: `{타입}` - {반환값의 의미}

== 데이터 변환 흐름
1. {입력 데이터 형식}
2. {변환 단계}
3. {출력 데이터 형식}""",
        },
    },
    LanguageGroup.WEB_FRONTEND: {
        'expert': {'en': 'web frontend', 'ko': '웹 프론트엔드'},
        'focus': {
            'en': (
                'Component or page structure and its props/inputs',
                'Layout, styling strategy and responsive behavior',
                'User interactions, events and state changes',
                'Accessibility (semantic markup, ARIA, keyboard support)',
                'Browser compatibility and rendering performance',
            ),
            'ko': (
                '컴포넌트 또는 페이지 구조와 props/입력값',
                '레이아웃, 스타일링 전략과 반응형 동작',
                '사용자 상호작용, 이벤트와 상태 변화',
                '접근성 (시맨틱 마크업, ARIA, 키보드 지원)',
                '브라우저 호환성과 렌더링 성능',
            ),
        },
        'rows': {'en': '|File Type|{Component/Page/Stylesheet/Template}',
                 'ko': '|파일 유형|{컴포넌트/페이지/스타일시트/템플릿}'},
        'sections': {
            'en': """== Structure
* {Main elements or components and their roles}

== Styling
* `{selector or class}` - {Visual role and responsive behavior}

== Interactions
* {User event} - {Resulting behavior or state change}

== Accessibility
* {Accessibility features and gaps}""",
            'ko': """== 구조
* {주요 요소 또는 컴포넌트와 그 역할}

== 스타일링
* `{선택자 또는 클래스}` - {시각적 역할과 반응형 동작}

== 상호작용
* {사용자 이벤트} - {결과 동작 또는 상태 변화}

== 접근성
* {접근성 기능과 부족한 부분}""",
        },
    },
    LanguageGroup.DATA: {
        'expert': {'en': 'data file and SQL', 'ko': '데이터 파일 및 SQL'},
        'focus': {
            'en': (
                'Tables, columns, data types and relationships',
                'Query logic: joins, subqueries, aggregation and grouping',
                'Data integrity constraints and validation',
                'Indexes and performance considerations',
                'Show only the 1-2 key queries, at most 20 lines each',
            ),
            'ko': (
                '테이블, 컬럼, 데이터 타입과 관계',
                '쿼리 로직: 조인, 서브쿼리, 집계와 그룹핑',
                '데이터 무결성 제약 조건과 검증',
                '인덱스와 성능 고려사항',
                '핵심 쿼리 1-2개만 각 20줄 이내로 표시',
            ),
        },
        'rows': {'en': '|Data Type|{SQL Script/Schema/Dataset/Configuration}',
                 'ko': '|데이터 유형|{SQL 스크립트/스키마/데이터셋/설정}'},
        'sections': {
            'en': """== Data Structure
[cols="1,1,3"]
|===
|Name|Type|Description
|{column}|{type}|{meaning and constraints}
|===

== Key Queries
[source,sql]
----
{Simplified core query}
----
*Purpose*: {Business question answered by the query}""",
            'ko': """== 데이터 구조
[cols="1,1,3"]
|===
|이름|타입|설명
|{컬럼}|{타입}|{의미와 제약 조건}
|===

== 핵심 쿼리
[source,sql]
----
{간소화한 핵심 쿼리}
----
*목적*: {쿼리가 답하는 비즈니스 질문}""",
        },
    },
    LanguageGroup.NATIVE: {
        'expert': {'en': 'C/C++ systems code', 'ko': 'C/C++ 시스템 코드'},
        'focus': {
            'en': (
                'Exported functions, structs and macros declared by the file',
                'Memory ownership, allocation and release responsibilities',
                'Pointer validity, buffer sizes and undefined behavior risks',
                'Thread safety and reentrancy',
                'Platform or compiler specific behavior',
            ),
            'ko': (
                '파일이 선언하는 함수, 구조체와 매크로',
                '메모리 소유권, 할당과 해제 책임',
                '포인터 유효성, 버퍼 크기와 정의되지 않은 동작 위험',
                '스레드 안전성과 재진입성',
                '플랫폼 또는 컴파일러 의존 동작',
            ),
        },
        'rows': {'en': '|File Type|{Header/Source/Library}',
                 'ko': '|파일 유형|{헤더/소스/라이브러리}'},
        'sections': {
            'en': """== Types and Macros
* `{struct or macro}` - {Layout and purpose}

== Key Functions
=== {functionName}
[source,{language}]
----
{Function prototype}
----
*Purpose*: {What the function does}
*Memory*: {Who allocates and who frees}
*Return Value*: {Return value and error codes}""",
            'ko': """== 타입과 매크로
* `{구조체 또는 매크로}` - {구조와 목적}

== 주요 함수
=== {함수명}
[source,{language}]
----
{함수 프로토타입}
----
*목적*: {함수가 하는 일}
*메모리*: {할당과 해제 책임}
*반환값*: {반환값과 오류 코드}""",
        },
    },
}


def _build_template_set(group: LanguageGroup, lang: str) -> TemplateSet:
    profile = _GROUP_PROFILES[group]
    focus_areas = profile['focus'][lang]
    skeleton = _SKELETON[lang].substitute(rows=profile['rows'][lang], sections=profile['sections'][lang])
    system_prompt = _SYSTEM_PROMPT[lang].substitute(
        expert=profile['expert'][lang],
        focus='\n'.join(f"- {area}" for area in focus_areas),
        skeleton=skeleton,
    )
    return TemplateSet(
        system_prompt=system_prompt,
        create_template=CREATE_TEMPLATES[lang],
        update_template=UPDATE_TEMPLATES[lang],
        focus_areas=tuple(focus_areas),
    )


TEMPLATE_REGISTRY = MappingProxyType({
    (group, lang): _build_template_set(group, lang)
    for group in LanguageGroup
    for lang in SUPPORTED_DOC_LANGUAGES
})
