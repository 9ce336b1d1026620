# codeflattener/core/templating/default_templates.py
"""
Handlebars template used to render the flattened document.
Triple-stash is used for file-derived text so nothing is HTML-escaped.
"""

DEFAULT_MARKDOWN_TEMPLATE = r"""
# project: {{{project_path_header_display}}}
generated: {{generated_at}}
files: {{file_count}}

{{#if source_tree}}
```text
{{{source_tree}}}
```
{{/if}}

{{#if files}}
{{#each files}}
---
{{{this.front_matter}}}
---
# {{{this.heading}}}
{{{this.fence}}}{{{this.language}}}
{{{this.content}}}
{{{this.fence}}}
{{#if this.related_links}}

## Related Files
{{#each this.related_links}}
- [[{{{this}}}]]
{{/each}}
{{/if}}

---

{{/each}}
{{else}}
(no files matched the current filters.)
{{/if}}
"""
